"""
Client contexts.

A ClientContext bundles the stores for one principal: notifier, identity
store, authorization policy, project store and route guard. Contexts are
created at sign-in (or on the first authenticated request), held by the
ContextRegistry, and torn down at sign-out or evicted once idle.
"""

import logging
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple
from uuid import UUID

from supabase import Client

from collabhub.config.settings import Settings, get_settings
from collabhub.domain.authorization import AuthorizationPolicy
from collabhub.domain.identity import IdentityStore
from collabhub.domain.models import Principal
from collabhub.domain.notifier import Notifier
from collabhub.domain.project_store import ProjectStore
from collabhub.domain.route_guard import RouteGuard
from collabhub.infrastructure.services.notification_service import NotificationService
from collabhub.infrastructure.supabase_client import create_auth_client, get_supabase_client


logger = logging.getLogger(__name__)


class ClientContext:
    """All per-principal state, wired together."""

    def __init__(
        self,
        client: Client,
        settings: Optional[Settings] = None,
        auth_client_factory: Callable[[], Client] = create_auth_client,
    ):
        settings = settings or get_settings()
        self.client = client
        self.notifier = Notifier(settings.max_notices)
        self.identity = IdentityStore(client, self.notifier, auth_client_factory)
        self.authorization = AuthorizationPolicy(client, self.identity, self.notifier, settings)
        self.notifications = NotificationService(client)
        self.projects = ProjectStore(client, self.identity, self.notifier, self.notifications)
        self.guard = RouteGuard(self.identity, self.authorization, self.notifier)

    @property
    def principal_id(self) -> Optional[UUID]:
        return self.identity.user_id

    def snapshot(self) -> dict:
        return {
            **self.identity.snapshot(),
            "authorization": self.authorization.snapshot(),
            "store": self.projects.snapshot(),
        }


class ContextRegistry:
    """
    Live client contexts keyed by principal id.

    Bearer tokens expire without a sign-out, so contexts idle for longer than
    ``context_idle_timeout_seconds`` are evicted, and the least recently used
    one is dropped whenever more than ``max_contexts`` are held.
    """

    def __init__(
        self,
        client_factory: Callable[[], Client] = get_supabase_client,
        auth_client_factory: Callable[[], Client] = create_auth_client,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client_factory = client_factory
        self._auth_client_factory = auth_client_factory
        self._settings = settings
        self._clock = clock
        # principal id -> (context, last used), least recently used first
        self._contexts: "OrderedDict[UUID, Tuple[ClientContext, float]]" = OrderedDict()

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    def create(self) -> ClientContext:
        """A fresh, unregistered context (for anonymous requests and sign-in)."""
        return ClientContext(
            self._client_factory(),
            settings=self._settings,
            auth_client_factory=self._auth_client_factory,
        )

    def register(self, context: ClientContext) -> ClientContext:
        """Keep a signed-in context, replacing any previous one for the principal."""
        principal_id = context.principal_id
        if principal_id is None:
            raise ValueError("Cannot register a context without a principal")
        self._touch(principal_id, context)
        logger.info(f"Registered client context for {principal_id}")
        self.evict()
        return context

    def get(self, principal_id: UUID) -> Optional[ClientContext]:
        entry = self._contexts.get(principal_id)
        return entry[0] if entry else None

    async def for_principal(self, principal: Principal) -> ClientContext:
        """
        Context for a principal authenticated by bearer token.

        Identity and authorization state are reloaded on every call so that
        changes made through other contexts (an admin verifying a student,
        for instance) are picked up.
        """
        self.evict()
        context = self.get(principal.id)
        if context is None:
            context = self.create()
            await context.identity.restore(principal)
            return self.register(context)
        self._touch(principal.id, context)
        await context.identity.restore(principal)
        return context

    async def anonymous(self) -> ClientContext:
        context = self.create()
        await context.identity.restore(None)
        return context

    def discard(self, principal_id: UUID) -> Optional[ClientContext]:
        entry = self._contexts.pop(principal_id, None)
        if entry is not None:
            logger.info(f"Discarded client context for {principal_id}")
            return entry[0]
        return None

    def evict(self) -> int:
        """Drop idle contexts, then the oldest ones above the cap. Returns how many went."""
        settings = self.settings
        cutoff = self._clock() - settings.context_idle_timeout_seconds
        evicted = 0
        while self._contexts:
            principal_id, (_, last_used) = next(iter(self._contexts.items()))
            if last_used > cutoff and len(self._contexts) <= settings.max_contexts:
                break
            del self._contexts[principal_id]
            evicted += 1
        if evicted:
            logger.info(f"Evicted {evicted} client context(s)")
        return evicted

    def _touch(self, principal_id: UUID, context: ClientContext) -> None:
        self._contexts[principal_id] = (context, self._clock())
        self._contexts.move_to_end(principal_id)

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, principal_id: object) -> bool:
        return principal_id in self._contexts
