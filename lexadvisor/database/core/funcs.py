"""
Service-layer operations for authentication and roles.

Each function is `@transactional`: called from outside a transaction it opens
and commits its own, called from inside one it joins it. The `session`
argument is filled in by the decorator.

`handle_new_user` is the new-user trigger: whenever an auth user is created it
inserts the matching profile and the default `user` role inside the same
transaction, so an account never exists without them.
"""

import logging
import re
import uuid
from uuid import UUID

from sqlalchemy.orm import Session

from lexadvisor.crypt.encrypt_decrypt import MIN_PASSWORD_LENGTH, EncryptionDec
from lexadvisor.database.daos.auth_user_dao import AuthUserDao
from lexadvisor.database.daos.profile_dao import ProfileDao
from lexadvisor.database.daos.user_role_dao import UserRoleDao
from lexadvisor.database.entities.auth_user import AuthUser
from lexadvisor.database.entities.enums import AppRole
from lexadvisor.database.entities.profile import Profile
from lexadvisor.database.entities.user_role import UserRole
from lexadvisor.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

INVALID_CREDENTIALS = "Invalid login credentials"
ALREADY_REGISTERED = "User already registered"
INVALID_EMAIL = "Unable to validate email address: invalid format"
WEAK_PASSWORD = f"Password should be at least {MIN_PASSWORD_LENGTH} characters."


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else uuid.UUID(str(value))


def _user_details(auth_user: AuthUser, profile: Profile | None) -> dict:
    metadata = auth_user.raw_user_meta_data or {}
    return {
        "id": str(auth_user.id),
        "email": auth_user.email,
        "full_name": profile.full_name if profile else metadata.get("full_name"),
    }


@transactional
def handle_new_user(auth_user: AuthUser, session: Session = None) -> None:
    """
    Insert the profile and default role of a freshly created auth user.

    Parameters
    ----------
    auth_user : AuthUser
        The newly staged auth user (already flushed, so ``id`` is set).
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    """
    metadata = auth_user.raw_user_meta_data or {}
    ProfileDao().createProfile(session, Profile(user_id=auth_user.id, full_name=metadata.get("full_name")))
    UserRoleDao().createUserRole(session, UserRole(user_id=auth_user.id, role=AppRole.USER.value))
    logger.info(f"Provisioned profile and default role for user {auth_user.id}")


@transactional
def register_user(email: str, password: str, full_name: str | None = None, session: Session = None) -> dict:
    """
    Validate the request, create the auth user and run the new-user trigger.

    Parameters
    ----------
    email : str
        Login email (must be unique).
    password : str
        Plaintext password, hashed at DAO level.
    full_name : str | None
        Display name stored on the profile.
    session : Session
        Active SQLAlchemy session (injected by @transactional).

    Returns
    -------
    dict
        - On success: {'res': True, 'detail': '', 'user_id': <uuid str>}
        - On failure: {'res': False, 'detail': <reason>}
    """
    email = (email or "").strip().lower()
    if not EMAIL_PATTERN.match(email):
        return {"res": False, "detail": INVALID_EMAIL}
    if not EncryptionDec().is_valid_password(password):
        return {"res": False, "detail": WEAK_PASSWORD}

    user_dao = AuthUserDao()
    if user_dao.fetchAuthUserByEmail(session, email) is not None:
        return {"res": False, "detail": ALREADY_REGISTERED}

    auth_user = user_dao.createAuthUser(
        session,
        AuthUser(email=email, encrypted_password=password, raw_user_meta_data={"full_name": full_name}),
    )
    handle_new_user(auth_user)
    return {"res": True, "detail": "", "user_id": str(auth_user.id)}


@transactional
def authenticate_user(email: str, password: str, session: Session = None) -> dict:
    """
    Authenticate a user by email and password.

    Returns
    -------
    dict
        - authenticated (bool): True if credentials are valid.
        - detail (str): Error message on failure.
        - user_details (dict | None): {id, email, full_name} on success.

    Notes
    -----
    Unknown email and wrong password yield the same message.
    """
    user_dao = AuthUserDao()
    enc = EncryptionDec()
    auth_user = user_dao.fetchAuthUserByEmail(session, email or "")
    if auth_user is None or not enc.check_passwords(password or "", auth_user.encrypted_password):
        return {"authenticated": False, "detail": INVALID_CREDENTIALS, "user_details": None}

    user_dao.updateLastSignIn(session, auth_user)
    profile = ProfileDao().fetchProfileByUserId(session, auth_user.id)
    return {"authenticated": True, "detail": "", "user_details": _user_details(auth_user, profile)}


@transactional
def fetch_user_details(user_id, session: Session = None) -> dict | None:
    """Return {id, email, full_name} for an existing auth user, else None."""
    try:
        key = _as_uuid(user_id)
    except ValueError:
        return None
    auth_user = AuthUserDao().fetchAuthUserById(session, key)
    if auth_user is None:
        return None
    return _user_details(auth_user, ProfileDao().fetchProfileByUserId(session, key))
