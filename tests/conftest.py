"""
Test configuration and fixtures for CollabHub.

Provides an in-memory stand-in for the Supabase client (tables, auth and
storage), token minting for authenticated requests, and app fixtures
wired to it.
"""

import os

# Settings are read at import time; configure them before importing the app.
os.environ["SUPABASE_URL"] = "https://testproject.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-with-enough-length-for-hs256"
os.environ["SUPABASE_JWKS_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "development"

import time
from copy import deepcopy
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from uuid import uuid4

import jwt
import pytest
from fastapi.testclient import TestClient


JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]
ISSUER = f"{os.environ['SUPABASE_URL']}/auth/v1"


def mint_token(
    user_id: str,
    email: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    expires_in: int = 3600,
) -> str:
    """HS256 access token shaped like the ones Supabase Auth issues."""
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "aud": "authenticated",
        "iss": ISSUER,
        "iat": now,
        "exp": now + expires_in,
        "email": email,
        "user_metadata": metadata or {},
    }
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


def auth_headers(user_id: str, email: Optional[str] = None, **metadata: Any) -> Dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(user_id, email, metadata)}"}


# =============================================================================
# In-memory Supabase client
# =============================================================================

# Column defaults the database would apply on insert
TABLE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "projects": {"status": "open", "selected_team": None},
    "applications": {"status": "pending"},
    "project_milestones": {"status": "not_started"},
    "project_tasks": {"status": "todo"},
    "team_members": {"role": "member", "status": "active"},
    "notifications": {"read": False},
    "user_verifications": {"is_verified": False},
}

TIMESTAMPED = {
    "profiles",
    "projects",
    "applications",
    "project_milestones",
    "project_tasks",
    "teams",
    "reviews",
}

UNIQUE_KEYS: Dict[str, List[tuple]] = {
    "profiles": [("id",)],
    "user_verifications": [("user_id",)],
    "team_members": [("team_id", "user_id")],
    "reviews": [("project_id", "reviewer_id", "reviewee_id")],
}


def _key(value: Any) -> str:
    return str(getattr(value, "value", value))


class FakeResponse:
    def __init__(self, data: Any):
        self.data = data
        self.count = len(data) if isinstance(data, list) else None


class FakeQuery:
    """Chainable query builder mirroring the postgrest-py calls in use."""

    def __init__(self, db: "FakeSupabase", table: str):
        self._db = db
        self._table = table
        self._op = "select"
        self._columns = "*"
        self._payload: Any = None
        self._on_conflict: Optional[str] = None
        self._filters: List = []
        self._order: List[tuple] = []
        self._limit: Optional[int] = None
        self._single: Optional[str] = None

    # Operations
    def select(self, columns: str = "*", **kwargs) -> "FakeQuery":
        self._columns = columns
        return self

    def insert(self, payload: Any, **kwargs) -> "FakeQuery":
        self._op, self._payload = "insert", payload
        return self

    def update(self, payload: Dict[str, Any], **kwargs) -> "FakeQuery":
        self._op, self._payload = "update", payload
        return self

    def upsert(self, payload: Any, on_conflict: Optional[str] = None, **kwargs) -> "FakeQuery":
        self._op, self._payload, self._on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self, **kwargs) -> "FakeQuery":
        self._op = "delete"
        return self

    # Filters and modifiers
    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: _key(row.get(column)) == _key(value))
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: _key(row.get(column)) != _key(value))
        return self

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        wanted = {_key(v) for v in values}
        self._filters.append(lambda row: _key(row.get(column)) in wanted)
        return self

    def order(self, column: str, desc: bool = False, **kwargs) -> "FakeQuery":
        self._order.append((column, desc))
        return self

    def limit(self, size: int, **kwargs) -> "FakeQuery":
        self._limit = size
        return self

    def maybe_single(self) -> "FakeQuery":
        self._single = "maybe"
        return self

    def single(self) -> "FakeQuery":
        self._single = "single"
        return self

    # Execution
    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(f(row) for f in self._filters)

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self._columns.strip() == "*":
            return deepcopy(row)
        columns = [c.strip() for c in self._columns.split(",")]
        return {c: deepcopy(row.get(c)) for c in columns}

    def execute(self) -> FakeResponse:
        self._db.check_failure(self._table, self._op)
        rows = self._db.rows(self._table)

        if self._op == "insert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            return FakeResponse([self._db.insert_row(self._table, p) for p in payloads])

        if self._op == "upsert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            return FakeResponse([self._db.upsert_row(self._table, p, self._on_conflict) for p in payloads])

        matched = [row for row in rows if self._matches(row)]

        if self._op == "update":
            for row in matched:
                row.update(deepcopy(self._payload))
            return FakeResponse([deepcopy(row) for row in matched])

        if self._op == "delete":
            self._db.tables[self._table] = [row for row in rows if row not in matched]
            return FakeResponse([deepcopy(row) for row in matched])

        for column, desc in reversed(self._order):
            matched.sort(key=lambda row: _key(row.get(column)), reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        data = [self._project(row) for row in matched]

        if self._single == "maybe":
            return FakeResponse(data[0] if data else None)
        if self._single == "single":
            if len(data) != 1:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            return FakeResponse(data[0])
        return FakeResponse(data)


class FakeAdmin:
    def __init__(self):
        self.revoked: List[str] = []

    def sign_out(self, token: str) -> None:
        self.revoked.append(token)


class FakeAuth:
    """Supabase Auth stand-in that issues real HS256 tokens."""

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.admin = FakeAdmin()
        self.signed_out = 0
        self.fail_sign_out = False

    def sign_up(self, credentials: Dict[str, Any]) -> SimpleNamespace:
        email = credentials["email"]
        if len(credentials["password"]) < 6:
            raise Exception("Password should be at least 6 characters")
        if email in self.users:
            raise Exception("User already registered")
        metadata = credentials.get("options", {}).get("data", {})
        user = SimpleNamespace(id=str(uuid4()), email=email, user_metadata=dict(metadata))
        self.users[email] = {"user": user, "password": credentials["password"]}
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials: Dict[str, Any]) -> SimpleNamespace:
        record = self.users.get(credentials["email"])
        if record is None or record["password"] != credentials["password"]:
            raise Exception("Invalid login credentials")
        user = record["user"]
        token = mint_token(user.id, user.email, user.user_metadata)
        session = SimpleNamespace(access_token=token, refresh_token="refresh-token", expires_in=3600)
        return SimpleNamespace(user=user, session=session)

    def sign_in_with_oauth(self, credentials: Dict[str, Any]) -> SimpleNamespace:
        provider = credentials["provider"]
        redirect_to = credentials.get("options", {}).get("redirect_to", "")
        return SimpleNamespace(
            provider=provider,
            url=f"{ISSUER}/authorize?provider={provider}&redirect_to={redirect_to}",
        )

    def sign_out(self) -> None:
        if self.fail_sign_out:
            raise Exception("Network error")
        self.signed_out += 1


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self._storage = storage
        self._name = name

    def upload(self, path: str, file: bytes, file_options: Optional[Dict[str, str]] = None):
        if self._storage.fail:
            raise Exception("Bucket not found")
        self._storage.files[(self._name, path)] = file
        return SimpleNamespace(path=path)

    def get_public_url(self, path: str) -> str:
        return f"https://testproject.supabase.co/storage/v1/object/public/{self._name}/{path}"

    def remove(self, paths: List[str]):
        for path in paths:
            self._storage.files.pop((self._name, path), None)
        return []


class FakeStorage:
    def __init__(self):
        self.files: Dict[tuple, bytes] = {}
        self.fail = False

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeSupabase:
    """In-memory tables plus auth and storage, shared by every context in a test."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.auth = FakeAuth()
        self.storage = FakeStorage()
        self.failures: set = set()
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def fail_on(self, table: str, op: str = "select") -> None:
        """Make every `op` against `table` raise, like a backend outage."""
        self.failures.add((table, op))

    def check_failure(self, table: str, op: str) -> None:
        if (table, op) in self.failures:
            raise Exception(f"Simulated {op} failure on {table}")

    def _tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def insert_row(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        row = {**TABLE_DEFAULTS.get(table, {}), **deepcopy(payload)}
        row.setdefault("id", str(uuid4()))
        stamp = self._tick()
        row.setdefault("created_at", stamp)
        if table in TIMESTAMPED:
            row.setdefault("updated_at", stamp)
        if table == "team_members":
            row.setdefault("joined_at", stamp)
        for columns in UNIQUE_KEYS.get(table, []):
            for existing in self.rows(table):
                if all(_key(existing.get(c)) == _key(row.get(c)) for c in columns):
                    raise Exception(
                        f'duplicate key value violates unique constraint "{table}_{"_".join(columns)}_key"'
                    )
        self.rows(table).append(row)
        return deepcopy(row)

    def upsert_row(self, table: str, payload: Dict[str, Any], on_conflict: Optional[str]) -> Dict[str, Any]:
        columns = [c.strip() for c in (on_conflict or "id").split(",")]
        for existing in self.rows(table):
            if all(_key(existing.get(c)) == _key(payload.get(c)) for c in columns):
                existing.update(deepcopy(payload))
                return deepcopy(existing)
        return self.insert_row(table, payload)

    # Seeding helpers
    def add(self, table: str, **values: Any) -> Dict[str, Any]:
        return self.insert_row(table, values)

    def add_profile(self, role: str = "student", **values: Any) -> Dict[str, Any]:
        defaults = {
            "id": str(uuid4()),
            "name": "Test User",
            "role": role,
            "email": f"{uuid4().hex[:8]}@example.com",
        }
        if role == "student":
            defaults["college"] = "State University"
        if role == "startup":
            defaults["company_name"] = "Acme Labs"
        return self.insert_row("profiles", {**defaults, **values})

    def add_project(self, created_by: str, **values: Any) -> Dict[str, Any]:
        today = date.today()
        defaults = {
            "title": "Landing page",
            "description": "Build a marketing site",
            "category": "web_development",
            "required_skills": ["React"],
            "start_date": today.isoformat(),
            "end_date": (today + timedelta(days=30)).isoformat(),
            "team_size": 3,
            "payment_model": "unpaid",
            "deliverables": ["Responsive site"],
            "created_by": created_by,
        }
        return self.insert_row("projects", {**defaults, **values})

    def add_team(self, lead_id: str, members: Optional[List[str]] = None, **values: Any) -> Dict[str, Any]:
        team = self.insert_row("teams", {"name": "Builders", "description": "", "lead_id": lead_id, **values})
        self.insert_row("team_members", {"team_id": team["id"], "user_id": lead_id, "role": "lead"})
        for user_id in members or []:
            self.insert_row("team_members", {"team_id": team["id"], "user_id": user_id})
        return team

    def add_code(self, college_id: str, code: str, expires_in_hours: float = 24) -> Dict[str, Any]:
        expires_at = datetime.now(timezone.utc) + timedelta(hours=expires_in_hours)
        return self.insert_row("college_verification_codes", {
            "college_id": college_id,
            "code": code,
            "expires_at": expires_at.isoformat(),
        })


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def settings():
    from collabhub.config.settings import get_settings
    return get_settings()


@pytest.fixture
def registry(fake_supabase, settings):
    from collabhub.domain.context import ContextRegistry
    return ContextRegistry(
        client_factory=lambda: fake_supabase,
        auth_client_factory=lambda: fake_supabase,
        settings=settings,
    )


@pytest.fixture
def context(registry):
    """An unregistered client context backed by the fake client."""
    return registry.create()


@pytest.fixture
def app(registry):
    """The FastAPI application, with its context registry on the fake client."""
    from collabhub.main import app

    previous = app.state.contexts
    app.state.contexts = registry
    yield app
    app.state.contexts = previous


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app)


@pytest.fixture
def student(fake_supabase):
    return fake_supabase.add_profile("student", name="Sam Student")


@pytest.fixture
def startup(fake_supabase):
    return fake_supabase.add_profile("startup", name="Stella Founder")


@pytest.fixture
def college_admin(fake_supabase):
    return fake_supabase.add_profile("college_admin", name="Cole Admin")


@pytest.fixture
def platform_admin(fake_supabase):
    return fake_supabase.add_profile("platform_admin", name="Pat Admin")


@pytest.fixture
def headers_for():
    """Bearer headers for a seeded profile row."""

    def build(profile: Dict[str, Any]) -> Dict[str, str]:
        return auth_headers(
            profile["id"], profile.get("email"), name=profile.get("name"), role=profile["role"]
        )

    return build


@pytest.fixture
def token_for():
    """Raw access token factory, for tests that shape their own claims."""
    return mint_token


@pytest.fixture
def sign_in_as(registry):
    """Async factory: the registered context for a seeded profile row."""
    from collabhub.domain.models import Principal

    async def build(profile: Dict[str, Any]):
        principal = Principal(
            id=profile["id"],
            email=profile.get("email"),
            metadata={"name": profile.get("name"), "role": profile["role"]},
        )
        return await registry.for_principal(principal)

    return build
