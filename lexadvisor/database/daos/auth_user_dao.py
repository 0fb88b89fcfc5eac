"""
AuthUser DAO

Purpose
-------
Thin data-access layer for the `AuthUser` ORM entity. Provides:
- Creation with password hashing
- Lookup by email or id
- Last sign-in updates

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller.
- Passwords are hashed using `EncryptionDec.hash_password(...)` before insert.

Error Handling
--------------
Each method catches generic `Exception`, logs a message, and re-raises.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from lexadvisor.crypt.encrypt_decrypt import EncryptionDec
from lexadvisor.database.entities.auth_user import AuthUser
from lexadvisor.database.entities.enums import utcnow

logger = logging.getLogger(__name__)


class AuthUserDao:
    """
    Data Access Object (DAO) for managing AuthUser entities.
    """

    def createAuthUser(self, session: Session, auth_user: AuthUser) -> AuthUser:
        """
        Create a new auth user with a hashed password.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        auth_user : AuthUser
            Entity whose ``encrypted_password`` still holds the plaintext.

        Returns
        -------
        AuthUser
            The staged (flushed) entity.
        """
        try:
            enc = EncryptionDec()
            auth_user.encrypted_password = enc.hash_password(text=auth_user.encrypted_password)
            session.add(auth_user)
            session.flush()
            return auth_user
        except Exception as e:
            logger.error(f"Error in AuthUserDao.createAuthUser. Error Message: {e}")
            raise e

    def fetchAuthUserByEmail(self, session: Session, email: str) -> AuthUser | None:
        """Fetch an auth user by (case-insensitive) email, or None."""
        try:
            stmt = select(AuthUser).where(AuthUser.email == email.strip().lower()).limit(1)
            return session.scalars(stmt).first()
        except Exception as e:
            logger.error(f"Error in AuthUserDao.fetchAuthUserByEmail. Error Message: {e}")
            raise e

    def fetchAuthUserById(self, session: Session, user_id: UUID) -> AuthUser | None:
        try:
            return session.get(AuthUser, user_id)
        except Exception as e:
            logger.error(f"Error in AuthUserDao.fetchAuthUserById. Error Message: {e}")
            raise e

    def updateLastSignIn(self, session: Session, auth_user: AuthUser) -> None:
        try:
            auth_user.last_sign_in_at = utcnow()
        except Exception as e:
            logger.error(f"Error in AuthUserDao.updateLastSignIn. Error Message: {e}")
            raise e
