"""
Authentication provider.

Issues and verifies the access tokens that carry a session, on top of the
service functions in :mod:`lexadvisor.database.core.funcs`. Sign-up runs the
new-user trigger (profile + default role) in the same transaction as the
account itself.
"""

import logging
from dataclasses import dataclass

from lexadvisor.api.errors import AuthError
from lexadvisor.api.utils import create_access_token, verify_token
from lexadvisor.database.core.funcs import authenticate_user, fetch_user_details, register_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthIdentity:
    """The signed-in user as seen by the session store and the views."""

    id: str
    email: str
    full_name: str | None = None


@dataclass(frozen=True)
class AuthSession:
    user: AuthIdentity
    access_token: str


class AuthProvider:
    """
    Email + password identity provider.

    Methods
    -------
    sign_up(email, password, full_name) -> AuthIdentity
    sign_in(email, password) -> AuthSession
    get_user(access_token) -> AuthIdentity | None
    sign_out(access_token) -> None
    """

    def sign_up(self, email: str, password: str, full_name: str | None = None) -> AuthIdentity:
        """
        Create an account.

        Raises
        ------
        AuthError
            Invalid email, weak password or already registered email.
        """
        res = register_user(email=email, password=password, full_name=full_name)
        if not res["res"]:
            raise AuthError(res["detail"])
        logger.info(f"Registered user {res['user_id']}")
        return AuthIdentity(id=res["user_id"], email=email.strip().lower(), full_name=full_name)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Verify credentials and open a session.

        Raises
        ------
        AuthError
            ``Invalid login credentials`` for an unknown email or wrong password.
        """
        auth = authenticate_user(email=email, password=password)
        if not auth["authenticated"]:
            raise AuthError(auth["detail"])
        user = AuthIdentity(**auth["user_details"])
        return AuthSession(user=user, access_token=create_access_token({"sub": user.id, "email": user.email}))

    def get_user(self, access_token: str | None) -> AuthIdentity | None:
        """Resolve a token to an existing user, or None."""
        if not access_token:
            return None
        subject = verify_token(access_token)
        if subject is None:
            return None
        details = fetch_user_details(subject)
        if details is None:
            logger.info(f"Token subject {subject} no longer exists")
            return None
        return AuthIdentity(**details)

    def sign_out(self, access_token: str | None) -> None:
        # Tokens are stateless; the client drops its cookie.
        logger.debug("Session closed")
