"""
UserRole DAO

Grants roles and lists the roles a user holds. Role changes requested by an
admin go through the data gateway instead, where the `user_roles` policies
apply.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from lexadvisor.database.entities.user_role import UserRole

logger = logging.getLogger(__name__)


class UserRoleDao:
    """
    Data Access Object (DAO) for managing UserRole entities.
    """

    def createUserRole(self, session: Session, user_role: UserRole) -> UserRole:
        try:
            session.add(user_role)
            return user_role
        except Exception as e:
            logger.error(f"Error in UserRoleDao.createUserRole. Error: {e}")
            raise e

    def fetchRolesByUserId(self, session: Session, user_id: UUID) -> list[str]:
        """
        Fetch all role names held by a user.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : UUID
            Unique identifier of the user.

        Returns
        -------
        list[str]
            Role names, possibly empty.
        """
        try:
            stmt = select(UserRole.role).where(UserRole.user_id == user_id)
            return list(session.scalars(stmt).all())
        except Exception as e:
            logger.error(f"Error in UserRoleDao.fetchRolesByUserId. Error: {e}")
            raise e
