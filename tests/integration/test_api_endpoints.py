"""
Integration tests for the CollabHub API endpoints.

Tests the full request/response cycle against the in-memory Supabase
stand-in.
"""

import pytest
from datetime import date, timedelta
from uuid import uuid4

from fastapi.testclient import TestClient


def project_body(**overrides):
    today = date.today()
    body = {
        "title": "Landing page",
        "description": "Marketing site for our launch",
        "category": "web_development",
        "required_skills": ["React", "CSS"],
        "start_date": today.isoformat(),
        "end_date": (today + timedelta(days=30)).isoformat(),
        "team_size": 3,
        "payment_model": "unpaid",
        "deliverables": ["Responsive site"],
    }
    body.update(overrides)
    return body


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, client: TestClient):
        """Root endpoint should return welcome message."""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "CollabHub API"

    def test_health_endpoint(self, client: TestClient):
        """Health endpoint should return healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuthEndpoints:
    """Sign-up, sign-in, the current identity and sign-out."""

    def test_signup_then_signin(self, client: TestClient, fake_supabase):
        response = client.post("/api/auth/signup", json={
            "email": "sam@example.com", "password": "secret123", "name": "Sam", "role": "student",
        })
        assert response.status_code == 201
        assert response.json()["redirect_to"] == "/signin/student"
        assert response.json()["notices"][0]["level"] == "success"

        response = client.post("/api/auth/signin", json={"email": "sam@example.com", "password": "secret123"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        data = me.json()
        assert data["profile"]["name"] == "Sam"
        assert data["authorization"]["role"] == "student"
        assert "submit_application" in data["authorization"]["permissions"]

    def test_signup_rejects_admin_roles(self, client: TestClient):
        response = client.post("/api/auth/signup", json={
            "email": "x@example.com", "password": "secret123", "name": "X", "role": "college_admin",
        })
        assert response.status_code == 422

    def test_signup_duplicate_email(self, client: TestClient):
        body = {"email": "sam@example.com", "password": "secret123", "name": "Sam", "role": "student"}
        client.post("/api/auth/signup", json=body)

        response = client.post("/api/auth/signup", json=body)

        assert response.status_code == 401
        assert response.json()["message"] == "User already registered"

    def test_signin_bad_credentials(self, client: TestClient):
        response = client.post("/api/auth/signin", json={"email": "nobody@example.com", "password": "x"})
        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"

    def test_oauth_url(self, client: TestClient):
        response = client.post("/api/auth/oauth", json={"provider": "github"})
        assert response.status_code == 200
        assert "provider=github" in response.json()["url"]

    def test_signout_discards_context(self, client: TestClient, app, student, headers_for, fake_supabase):
        headers = headers_for(student)
        client.get("/api/auth/me", headers=headers)
        assert len(app.state.contexts) == 1

        response = client.post("/api/auth/signout", headers=headers)

        assert response.status_code == 204
        assert len(app.state.contexts) == 0
        assert len(fake_supabase.auth.admin.revoked) == 1

    @pytest.mark.parametrize("path", [
        "/api/auth/me",
        "/api/profiles/me",
        "/api/projects",
        "/api/teams",
        "/api/notifications",
        "/api/session/notices",
    ])
    def test_protected_endpoints_require_token(self, client: TestClient, path):
        assert client.get(path).status_code == 401


class TestProfileEndpoints:

    def test_get_and_update_profile(self, client: TestClient, student, headers_for):
        headers = headers_for(student)

        response = client.patch("/api/profiles/me", json={"bio": "Hello", "skills": ["Python"]}, headers=headers)

        assert response.status_code == 200
        assert response.json()["bio"] == "Hello"
        assert client.get("/api/profiles/me", headers=headers).json()["skills"] == ["Python"]

    def test_profile_missing(self, client: TestClient, headers_for):
        orphan = {"id": str(uuid4()), "email": "ghost@example.com", "name": "Ghost", "role": "student"}

        assert client.get("/api/profiles/me", headers=headers_for(orphan)).status_code == 404

    def test_complete_profile_creates_missing_row(self, client: TestClient, fake_supabase, headers_for):
        orphan = {"id": str(uuid4()), "email": "founder@example.com", "name": "Fran", "role": "startup"}

        response = client.post(
            "/api/profiles/me/complete", json={"company_name": "Fran Co"}, headers=headers_for(orphan)
        )

        assert response.status_code == 200
        assert response.json() == {"is_complete": True, "missing_fields": []}
        assert fake_supabase.rows("profiles")[0]["company_name"] == "Fran Co"

    def test_completeness(self, client: TestClient, fake_supabase, headers_for):
        student = fake_supabase.add_profile("student", name="Sam", college="")

        response = client.get("/api/profiles/me/completeness", headers=headers_for(student))

        assert response.json() == {"is_complete": False, "missing_fields": ["college"]}

    def test_resume_upload(self, client: TestClient, fake_supabase, student, headers_for):
        response = client.post(
            "/api/profiles/me/resume",
            files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
            headers=headers_for(student),
        )

        assert response.status_code == 200
        url = response.json()["url"]
        assert url.endswith(f"resumes/{student['id']}-resume.pdf")
        assert response.json()["profile"]["resume_url"] == url

    def test_resume_upload_failure(self, client: TestClient, fake_supabase, student, headers_for):
        fake_supabase.storage.fail = True

        response = client.post(
            "/api/profiles/me/resume",
            files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
            headers=headers_for(student),
        )

        assert response.status_code == 502

    def test_other_profile(self, client: TestClient, student, startup, headers_for):
        response = client.get(f"/api/profiles/{startup['id']}", headers=headers_for(student))

        assert response.status_code == 200
        assert response.json()["company_name"] == "Acme Labs"


class TestVerificationEndpoints:
    """Each verification outcome maps to its own status code."""

    def test_valid_code(self, client: TestClient, fake_supabase, student, headers_for):
        college_id = str(uuid4())
        fake_supabase.add_code(college_id, "ABC123")
        headers = headers_for(student)

        response = client.post("/api/verification/verify", json={"college_id": college_id, "code": "abc123"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["outcome"] == "verified"
        status = client.get("/api/verification/status", headers=headers).json()
        assert status == {"is_verified": True, "college_id": college_id}

    def test_invalid_code(self, client: TestClient, fake_supabase, student, headers_for):
        response = client.post(
            "/api/verification/verify", json={"college_id": str(uuid4()), "code": "NOPE"},
            headers=headers_for(student),
        )

        assert response.status_code == 400
        assert response.json()["verified"] is False
        assert response.json()["outcome"] == "invalid_code"

    def test_expired_code(self, client: TestClient, fake_supabase, student, headers_for):
        college_id = str(uuid4())
        fake_supabase.add_code(college_id, "OLD999", expires_in_hours=-1)

        response = client.post(
            "/api/verification/verify", json={"college_id": college_id, "code": "OLD999"},
            headers=headers_for(student),
        )

        assert response.status_code == 400
        assert response.json()["outcome"] == "expired"

    def test_backend_error(self, client: TestClient, fake_supabase, student, headers_for):
        fake_supabase.fail_on("college_verification_codes", "select")

        response = client.post(
            "/api/verification/verify", json={"college_id": str(uuid4()), "code": "ABC123"},
            headers=headers_for(student),
        )

        assert response.status_code == 502
        assert response.json()["outcome"] == "backend_error"

    def test_college_admin_issues_code(self, client: TestClient, college_admin, student, headers_for):
        college_id = str(uuid4())

        issued = client.post("/api/verification/codes", json={"college_id": college_id}, headers=headers_for(college_admin))

        assert issued.status_code == 201
        code = issued.json()["code"]
        response = client.post(
            "/api/verification/verify", json={"college_id": college_id, "code": code},
            headers=headers_for(student),
        )
        assert response.status_code == 200

    def test_student_cannot_issue_codes(self, client: TestClient, student, headers_for):
        response = client.post("/api/verification/codes", json={"college_id": str(uuid4())}, headers=headers_for(student))

        assert response.status_code == 403

    def test_self_declared_admin_without_profile(self, client: TestClient, fake_supabase, headers_for):
        mallory = {"id": str(uuid4()), "email": "mallory@example.com", "name": "Mallory", "role": "platform_admin"}
        headers = headers_for(mallory)

        issued = client.post("/api/verification/codes", json={"college_id": str(uuid4())}, headers=headers)
        repaired = client.post("/api/profiles/me/repair", headers=headers)

        assert issued.status_code == 403
        assert repaired.status_code == 200
        assert repaired.json()["role"] == "student"


class TestProjectEndpoints:

    def test_startup_creates_project(self, client: TestClient, startup, headers_for):
        response = client.post(
            "/api/projects",
            json={**project_body(), "milestones": [{"title": "Design"}]},
            headers=headers_for(startup),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "open"
        assert data["created_by"] == startup["id"]
        assert data["milestones"][0]["title"] == "Design"

    def test_student_cannot_create_project(self, client: TestClient, student, headers_for):
        response = client.post("/api/projects", json=project_body(), headers=headers_for(student))

        assert response.status_code == 403
        assert response.json()["details"]["permission"] == "create_project"

    def test_invalid_form_lists_field_errors(self, client: TestClient, startup, headers_for):
        response = client.post(
            "/api/projects",
            json=project_body(title="", payment_model="stipend"),
            headers=headers_for(startup),
        )

        assert response.status_code == 400
        errors = response.json()["details"]["errors"]
        assert set(errors) == {"title", "stipend_amount"}

    def test_project_detail_with_progress(self, client: TestClient, fake_supabase, startup, headers_for):
        project = fake_supabase.add_project(startup["id"])
        fake_supabase.add("project_milestones", project_id=project["id"], title="A", status="completed")
        fake_supabase.add("project_milestones", project_id=project["id"], title="B")

        response = client.get(f"/api/projects/{project['id']}", headers=headers_for(startup))

        assert response.status_code == 200
        progress = response.json()["progress"]
        assert progress["progress"] == 50
        assert progress["overdue"] is False

    def test_missing_project(self, client: TestClient, startup, headers_for):
        assert client.get(f"/api/projects/{uuid4()}", headers=headers_for(startup)).status_code == 404

    def test_only_owner_can_edit(self, client: TestClient, fake_supabase, startup, headers_for):
        project = fake_supabase.add_project(startup["id"])
        rival = fake_supabase.add_profile("startup", name="Rival")

        denied = client.patch(f"/api/projects/{project['id']}", json={"title": "Mine now"}, headers=headers_for(rival))
        allowed = client.patch(f"/api/projects/{project['id']}", json={"title": "Renamed"}, headers=headers_for(startup))

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["title"] == "Renamed"

    def test_platform_admin_can_delete_any(self, client: TestClient, fake_supabase, startup, platform_admin, headers_for):
        project = fake_supabase.add_project(startup["id"])

        response = client.delete(f"/api/projects/{project['id']}", headers=headers_for(platform_admin))

        assert response.status_code == 204
        assert fake_supabase.rows("projects") == []

    def test_mine_and_templates(self, client: TestClient, fake_supabase, startup, headers_for):
        fake_supabase.add_project(startup["id"], title="Ours")
        fake_supabase.add_project(fake_supabase.add_profile("startup")["id"], title="Theirs")
        headers = headers_for(startup)

        mine = client.get("/api/projects/mine", headers=headers).json()
        catalog = client.get("/api/projects/templates").json()

        assert [p["title"] for p in mine] == ["Ours"]
        assert len(catalog["templates"]) == 4
        assert catalog["payment_models"][0]["value"] == "unpaid"

    def test_project_file_upload(self, client: TestClient, fake_supabase, startup, headers_for):
        project = fake_supabase.add_project(startup["id"])

        response = client.post(
            f"/api/projects/{project['id']}/files",
            files={"file": ("brief.docx", b"...", "application/octet-stream")},
            headers=headers_for(startup),
        )

        assert response.status_code == 201
        assert f"projects/{project['id']}/" in response.json()["url"]


class TestTeamEndpoints:

    def test_create_and_invite(self, client: TestClient, fake_supabase, student, headers_for):
        mate = fake_supabase.add_profile("student", name="Mo", email="mo@example.com")
        headers = headers_for(student)

        team = client.post("/api/teams", json={"name": "Night Owls"}, headers=headers).json()
        invited = client.post(f"/api/teams/{team['id']}/members", json={"email": "mo@example.com"}, headers=headers)

        assert invited.status_code == 201
        assert invited.json()["status"] == "pending"
        members = client.get(f"/api/teams/{team['id']}", headers=headers).json()["members"]
        assert {m["user_id"] for m in members} == {student["id"], mate["id"]}

    def test_only_lead_manages_members(self, client: TestClient, fake_supabase, student, headers_for):
        lead = fake_supabase.add_profile("student", name="Lead")
        team = fake_supabase.add_team(lead["id"])

        response = client.post(f"/api/teams/{team['id']}/members", json={"email": "x@example.com"}, headers=headers_for(student))

        assert response.status_code == 403

    def test_join_twice_conflicts(self, client: TestClient, fake_supabase, student, headers_for):
        team = fake_supabase.add_team(fake_supabase.add_profile("student")["id"])
        headers = headers_for(student)

        assert client.post(f"/api/teams/{team['id']}/join", headers=headers).status_code == 201
        assert client.post(f"/api/teams/{team['id']}/join", headers=headers).status_code == 409

    def test_startup_cannot_create_team(self, client: TestClient, startup, headers_for):
        assert client.post("/api/teams", json={"name": "Acme"}, headers=headers_for(startup)).status_code == 403

    def test_lead_deletes_team(self, client: TestClient, fake_supabase, student, headers_for):
        team = fake_supabase.add_team(student["id"])

        assert client.delete(f"/api/teams/{team['id']}", headers=headers_for(student)).status_code == 204
        assert fake_supabase.rows("teams") == []


class TestApplicationEndpoints:

    def _apply(self, client, fake_supabase, startup, student, headers_for):
        project = fake_supabase.add_project(startup["id"])
        team = fake_supabase.add_team(student["id"])
        response = client.post("/api/applications", json={
            "project_id": project["id"], "team_id": team["id"], "cover_letter": "Pick us",
        }, headers=headers_for(student))
        return project, team, response

    def test_apply_and_list(self, client: TestClient, fake_supabase, startup, student, headers_for):
        project, _, response = self._apply(client, fake_supabase, startup, student, headers_for)

        assert response.status_code == 201
        owner_view = client.get(f"/api/applications?project_id={project['id']}", headers=headers_for(startup))
        assert [a["id"] for a in owner_view.json()] == [response.json()["id"]]
        assert len(client.get("/api/applications", headers=headers_for(student)).json()) == 1

    def test_must_belong_to_team(self, client: TestClient, fake_supabase, startup, student, headers_for):
        project = fake_supabase.add_project(startup["id"])
        team = fake_supabase.add_team(fake_supabase.add_profile("student")["id"])

        response = client.post("/api/applications", json={
            "project_id": project["id"], "team_id": team["id"], "cover_letter": "Pick us",
        }, headers=headers_for(student))

        assert response.status_code == 403

    def test_pending_invitee_applies_after_accepting(
        self, client: TestClient, fake_supabase, startup, student, headers_for
    ):
        project = fake_supabase.add_project(startup["id"])
        invitee = fake_supabase.add_profile("student", name="Ivy", email="ivy@example.com")
        team = client.post("/api/teams", json={"name": "Night Owls"}, headers=headers_for(student)).json()
        client.post(f"/api/teams/{team['id']}/members", json={"email": "ivy@example.com"}, headers=headers_for(student))
        body = {"project_id": project["id"], "team_id": team["id"], "cover_letter": "Pick us"}

        before = client.post("/api/applications", json=body, headers=headers_for(invitee))
        joined = client.post(f"/api/teams/{team['id']}/join", headers=headers_for(invitee))
        after = client.post("/api/applications", json=body, headers=headers_for(invitee))

        assert before.status_code == 403
        assert joined.status_code == 201
        assert joined.json()["status"] == "active"
        assert after.status_code == 201

    def test_accept_then_reject_conflicts(self, client: TestClient, fake_supabase, startup, student, headers_for):
        _, _, applied = self._apply(client, fake_supabase, startup, student, headers_for)
        url = f"/api/applications/{applied.json()['id']}/status"

        accepted = client.patch(url, json={"status": "accepted"}, headers=headers_for(startup))
        again = client.patch(url, json={"status": "rejected"}, headers=headers_for(startup))

        assert accepted.status_code == 200
        assert accepted.json()["status"] == "accepted"
        assert again.status_code == 409

    def test_other_startup_cannot_decide(self, client: TestClient, fake_supabase, startup, student, headers_for):
        _, _, applied = self._apply(client, fake_supabase, startup, student, headers_for)
        rival = fake_supabase.add_profile("startup")

        response = client.patch(
            f"/api/applications/{applied.json()['id']}/status",
            json={"status": "rejected"},
            headers=headers_for(rival),
        )

        assert response.status_code == 403

    def test_withdraw(self, client: TestClient, fake_supabase, startup, student, headers_for):
        _, _, applied = self._apply(client, fake_supabase, startup, student, headers_for)

        response = client.delete(f"/api/applications/{applied.json()['id']}", headers=headers_for(student))

        assert response.status_code == 204
        assert fake_supabase.rows("applications") == []


class TestMilestoneAndTaskEndpoints:

    def test_owner_manages_milestones(self, client: TestClient, fake_supabase, startup, student, headers_for):
        project = fake_supabase.add_project(startup["id"])

        created = client.post(f"/api/projects/{project['id']}/milestones", json={"title": "MVP"}, headers=headers_for(startup))
        denied = client.post(f"/api/projects/{project['id']}/milestones", json={"title": "Hijack"}, headers=headers_for(student))

        assert created.status_code == 201
        assert denied.status_code == 403

    def test_task_lifecycle(self, client: TestClient, fake_supabase, startup, headers_for):
        project = fake_supabase.add_project(startup["id"])
        headers = headers_for(startup)

        task = client.post(f"/api/projects/{project['id']}/tasks", json={"title": "Wireframes"}, headers=headers)
        assert task.status_code == 201
        assert task.json()["status"] == "todo"

        moved = client.patch(f"/api/tasks/{task.json()['id']}/status", json={"status": "in_progress"}, headers=headers)
        assert moved.json()["status"] == "in_progress"

        assert client.delete(f"/api/tasks/{task.json()['id']}", headers=headers).status_code == 204

    def test_outsider_cannot_add_tasks(self, client: TestClient, fake_supabase, startup, student, headers_for):
        project = fake_supabase.add_project(startup["id"])

        response = client.post(f"/api/projects/{project['id']}/tasks", json={"title": "x"}, headers=headers_for(student))

        assert response.status_code == 403


class TestMessageAndNotificationEndpoints:

    def test_team_thread(self, client: TestClient, fake_supabase, student, headers_for):
        team = fake_supabase.add_team(student["id"])
        headers = headers_for(student)

        sent = client.post(f"/api/messages/teams/{team['id']}", json={"content": "Standup?"}, headers=headers)
        thread = client.get(f"/api/messages/teams/{team['id']}", headers=headers)

        assert sent.status_code == 201
        assert [m["content"] for m in thread.json()] == ["Standup?"]

    def test_non_member_cannot_read_team_thread(self, client: TestClient, fake_supabase, student, headers_for):
        team = fake_supabase.add_team(fake_supabase.add_profile("student")["id"])

        assert client.get(f"/api/messages/teams/{team['id']}", headers=headers_for(student)).status_code == 403

    def test_project_thread_for_owner(self, client: TestClient, fake_supabase, startup, headers_for):
        project = fake_supabase.add_project(startup["id"])

        response = client.post(f"/api/messages/projects/{project['id']}", json={"content": "Welcome"}, headers=headers_for(startup))

        assert response.status_code == 201

    def test_notifications(self, client: TestClient, fake_supabase, student, headers_for):
        note = fake_supabase.add(
            "notifications", user_id=student["id"], title="Hi", message="...", type="task_assigned"
        )
        headers = headers_for(student)

        assert client.get("/api/notifications/unread-count", headers=headers).json()["unread"] == 1
        read = client.post(f"/api/notifications/{note['id']}/read", headers=headers)
        assert read.json()["read"] is True
        assert client.get("/api/notifications/unread-count", headers=headers).json()["unread"] == 0


class TestNavigationEndpoints:

    def test_anonymous_is_sent_to_signin(self, client: TestClient):
        response = client.post("/api/navigation/resolve", json={"path": "/dashboard", "preferred_role": "startup"})

        assert response.status_code == 200
        decision = response.json()["decision"]
        assert decision == {
            "outcome": "redirect",
            "target": "/signin/startup",
            "reason": "unauthenticated",
            "notice": None,
        }

    def test_role_mismatch_returns_notice(self, client: TestClient, student, headers_for):
        response = client.post("/api/navigation/resolve", json={"path": "/create-project"}, headers=headers_for(student))

        data = response.json()
        assert data["decision"]["target"] == "/dashboard"
        assert data["notices"][0]["level"] == "error"

    def test_unknown_path(self, client: TestClient):
        response = client.post("/api/navigation/resolve", json={"path": "/nope"})

        assert response.json()["decision"]["outcome"] == "not_found"

    def test_notices_are_drained_once(self, client: TestClient, student, headers_for):
        headers = headers_for(student)
        client.patch("/api/profiles/me", json={"bio": "Hi"}, headers=headers)

        first = client.get("/api/session/notices", headers=headers).json()
        second = client.get("/api/session/notices", headers=headers).json()

        assert [n["message"] for n in first] == ["Profile updated successfully"]
        assert second == []

    def test_resolve_leaves_earlier_notices_queued(self, client: TestClient, student, headers_for):
        headers = headers_for(student)
        client.patch("/api/profiles/me", json={"bio": "Hi"}, headers=headers)

        resolved = client.post("/api/navigation/resolve", json={"path": "/create-project"}, headers=headers).json()
        pending = client.get("/api/session/notices", headers=headers).json()

        assert [n["message"] for n in resolved["notices"]] == ["You don't have access to this page"]
        assert [n["message"] for n in pending] == ["Profile updated successfully"]


class TestReviewEndpoints:

    def _accepted_project(self, fake_supabase, startup, student):
        project = fake_supabase.add_project(startup["id"], title="Landing page")
        team = fake_supabase.add_team(student["id"])
        fake_supabase.add("applications", project_id=project["id"], team_id=team["id"],
                          user_id=student["id"], status="accepted")
        return project

    def test_owner_reviews_accepted_student(self, client: TestClient, fake_supabase, startup, student, headers_for):
        project = self._accepted_project(fake_supabase, startup, student)

        created = client.post(
            f"/api/projects/{project['id']}/reviews",
            json={"reviewee_id": student["id"], "rating": 5, "comment": "Shipped on time"},
            headers=headers_for(startup),
        )

        assert created.status_code == 201
        listed = client.get(f"/api/projects/{project['id']}/reviews", headers=headers_for(student)).json()
        assert [r["reviewer_name"] for r in listed] == [startup["name"]]
        received = client.get(f"/api/users/{student['id']}/reviews", headers=headers_for(student)).json()
        assert received[0]["project_title"] == "Landing page"
        rating = client.get(f"/api/users/{student['id']}/rating", headers=headers_for(startup)).json()
        assert rating == {"user_id": student["id"], "rating": 5.0, "review_count": 1}
        inbox = client.get("/api/notifications", headers=headers_for(student)).json()
        assert inbox[0]["type"] == "review_received"

    def test_outsider_cannot_review(self, client: TestClient, fake_supabase, startup, student, headers_for):
        project = self._accepted_project(fake_supabase, startup, student)
        outsider = fake_supabase.add_profile("student")

        response = client.post(
            f"/api/projects/{project['id']}/reviews",
            json={"reviewee_id": student["id"], "rating": 1},
            headers=headers_for(outsider),
        )

        assert response.status_code == 403

    def test_reviewee_must_take_part(self, client: TestClient, fake_supabase, startup, student, headers_for):
        project = self._accepted_project(fake_supabase, startup, student)
        outsider = fake_supabase.add_profile("student")

        response = client.post(
            f"/api/projects/{project['id']}/reviews",
            json={"reviewee_id": outsider["id"], "rating": 4},
            headers=headers_for(startup),
        )

        assert response.status_code == 400

    def test_second_review_conflicts(self, client: TestClient, fake_supabase, startup, student, headers_for):
        project = self._accepted_project(fake_supabase, startup, student)
        body = {"reviewee_id": startup["id"], "rating": 4}
        url = f"/api/projects/{project['id']}/reviews"

        assert client.post(url, json=body, headers=headers_for(student)).status_code == 201
        assert client.post(url, json=body, headers=headers_for(student)).status_code == 409

    def test_only_author_edits(self, client: TestClient, fake_supabase, startup, student, headers_for):
        project = self._accepted_project(fake_supabase, startup, student)
        review = fake_supabase.add("reviews", project_id=project["id"], reviewer_id=startup["id"],
                                   reviewee_id=student["id"], rating=3)
        url = f"/api/reviews/{review['id']}"

        assert client.patch(url, json={"rating": 5}, headers=headers_for(student)).status_code == 403
        assert client.patch(url, json={"rating": 4}, headers=headers_for(startup)).json()["rating"] == 4
        assert client.delete(url, headers=headers_for(student)).status_code == 403
        assert client.delete(url, headers=headers_for(startup)).status_code == 204
