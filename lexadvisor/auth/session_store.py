"""
Session store.

One `SessionStore` per client (per HTTP request on the server side) holds
who is signed in, which role they resolved to, and whether the identity is
still being determined. Views receive the store at construction and read
``user`` / ``role`` from it; they never cache either.

Role resolution goes through the data gateway, so it is subject to the
``user_roles`` policies like any other read: a user can always see their own
role rows. When several rows exist the most privileged role wins.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from lexadvisor.api.errors import AuthError
from lexadvisor.auth.provider import AuthIdentity, AuthProvider
from lexadvisor.database.entities.enums import highest_role
from lexadvisor.database.gateway import DataGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a sign-in / sign-up / sign-out call."""

    ok: bool
    error: str | None = None


class SessionStore:
    """
    Signed-in identity, its role and a loading flag, with change notification.

    Parameters
    ----------
    provider : AuthProvider, optional
        Identity provider, a default one is created when omitted.
    gateway_factory : callable, optional
        ``user_id -> DataGateway``; injectable for tests.

    Attributes
    ----------
    user : AuthIdentity | None
    role : str | None
        None while unresolved or when the user holds no role.
    loading : bool
        True until the first identity resolution finished.
    access_token : str | None
    """

    def __init__(self, provider: AuthProvider | None = None, gateway_factory: Callable | None = None):
        self.provider = provider or AuthProvider()
        self._gateway_factory = gateway_factory or DataGateway
        self.user: AuthIdentity | None = None
        self.role: str | None = None
        self.loading = True
        self.access_token: str | None = None
        self._listeners: list[Callable] = []

    @property
    def gateway(self) -> DataGateway:
        """Gateway bound to the current identity (anonymous when signed out)."""
        return self._gateway_factory(self.user.id if self.user else None)

    def subscribe(self, listener: Callable) -> Callable[[], None]:
        """
        Register ``listener(store)`` for identity / role changes.

        Returns
        -------
        callable
            Call it to unsubscribe; calling it twice is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener failed")

    def _set_identity(self, user: AuthIdentity | None, access_token: str | None) -> None:
        self.user = user
        self.access_token = access_token if user else None
        self.role = None
        if user is not None:
            self._resolve_role()
        self.loading = False
        self._notify()

    def _resolve_role(self) -> None:
        res = self.gateway.table("user_roles").select("role").eq("user_id", self.user.id).execute()
        if res.error:
            logger.warning(f"Could not resolve role for {self.user.id}: {res.error.message}")
            self.role = None
            return
        self.role = highest_role(row["role"] for row in res.data)

    def refresh_role(self) -> str | None:
        """Re-read the role of the current user and notify subscribers."""
        if self.user is None:
            self.role = None
        else:
            self._resolve_role()
        self._notify()
        return self.role

    def restore(self, access_token: str | None) -> bool:
        """
        Re-hydrate a session from an access token.

        Returns
        -------
        bool
            True when the token resolved to an existing user.
        """
        user = self.provider.get_user(access_token)
        self._set_identity(user, access_token)
        return user is not None

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            session = self.provider.sign_in(email, password)
        except AuthError as e:
            return AuthResult(ok=False, error=str(e))
        self._set_identity(session.user, session.access_token)
        return AuthResult(ok=True)

    def sign_up(self, email: str, password: str, display_name: str | None = None) -> AuthResult:
        """
        Create an account. The profile and the default ``user`` role are
        created by the provider; the caller stays signed out.
        """
        try:
            self.provider.sign_up(email, password, display_name)
        except AuthError as e:
            return AuthResult(ok=False, error=str(e))
        return AuthResult(ok=True)

    def sign_out(self) -> AuthResult:
        self.provider.sign_out(self.access_token)
        self._set_identity(None, None)
        return AuthResult(ok=True)
