"""
Profile DAO

Creates and reads `profiles` rows with the authority of the auth service.
Used by the new-user trigger and by session restoration.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from lexadvisor.database.entities.profile import Profile

logger = logging.getLogger(__name__)


class ProfileDao:
    """
    Data Access Object (DAO) for managing Profile entities.
    """

    def createProfile(self, session: Session, profile: Profile) -> Profile:
        """
        Stage a new profile.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        profile : Profile
            Profile entity to add.

        Returns
        -------
        Profile
            The staged entity.
        """
        try:
            session.add(profile)
            return profile
        except Exception as e:
            logger.error(f"Error in ProfileDao.createProfile. Error: {e}")
            raise e

    def fetchProfileByUserId(self, session: Session, user_id: UUID) -> Profile | None:
        try:
            stmt = select(Profile).where(Profile.user_id == user_id).limit(1)
            return session.scalars(stmt).first()
        except Exception as e:
            logger.error(f"Error in ProfileDao.fetchProfileByUserId. Error: {e}")
            raise e
