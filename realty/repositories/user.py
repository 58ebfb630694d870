"""
User repository for authentication and account management.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from realty.repositories.base import BaseRepository
from realty.models.user import User, UserRole
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Must include email, password and full_name.
                Optional: role (defaults to USER) and is_active.

        Returns:
            Created user instance

        Raises:
            ValueError: If the email is invalid or taken, or the password too short
        """
        user_data = dict(user_data)
        email = User.validate_email_format(user_data.pop("email"))

        if await self.get_by_email(email):
            raise ValueError(f"User with email {email} already exists")

        hashed_password = User.hash_password(user_data.pop("password"))

        create_data = {
            **user_data,
            "email": email,
            "hashed_password": hashed_password,
            "role": user_data.get("role") or UserRole.USER,
            "is_active": user_data.get("is_active", True),
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        try:
            normalized_email = email.lower().strip()
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User instance if the credentials match an account, None otherwise.
            Inactive accounts are returned so the caller can report them.
        """
        user = await self.get_by_email(email)

        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        return user

    async def update_user_status(self, user_id: uuid.UUID, is_active: bool) -> Optional[User]:
        user = await self.update(user_id, {"is_active": is_active})
        if user:
            logger.info(f"Set is_active={is_active} for user {user.email}")
        return user

    async def get_users_by_role(self, role: UserRole, skip: int = 0, limit: int = 100) -> List[User]:
        return await self.get_multi(skip=skip, limit=limit, filters={"role": role})
