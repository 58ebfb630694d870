"""
Authentication service for registration, login and token management.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from realty.repositories.user import UserRepository
from realty.models.user import User, UserRole
from realty.schemas.user import UserCreate
from realty.utils.auth import (
    create_access_token,
    create_refresh_token,
    verify_token,
)
from realty.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    ForbiddenError,
    ValidationError,
    DuplicateResourceError,
    OperationFailedError
)
from jose import ExpiredSignatureError, JWTError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service.
    Handles user authentication flows and token management.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid
            InactiveUserError: If user account is inactive
        """
        if not email or not email.strip():
            raise ValidationError("Email is required")

        if not password:
            raise ValidationError("Password is required")

        try:
            user = await self.user_repo.authenticate_user(email, password)
        except Exception as e:
            logger.error(f"Authentication error for {email}: {e}")
            raise OperationFailedError("sign in")

        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning(f"Inactive user attempted to sign in: {email}")
            raise InactiveUserError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    def create_tokens(self, user: User) -> Tuple[str, str]:
        """Return (access_token, refresh_token) for the user."""
        access_token = create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role
        )
        refresh_token = create_refresh_token(user_id=user.id, email=user.email)
        return access_token, refresh_token

    async def login(self, email: str, password: str) -> Tuple[User, str, str]:
        user = await self.authenticate_user(email, password)
        access_token, refresh_token = self.create_tokens(user)
        return user, access_token, refresh_token

    async def register_user(self, user_data: UserCreate) -> User:
        """
        Self-service registration for renters/buyers and agents.

        Raises:
            ForbiddenError: If an admin account is requested
            DuplicateResourceError: If the email is already registered
            ValidationError: If the email or password is rejected
        """
        if user_data.role == UserRole.ADMIN:
            raise ForbiddenError("Administrator accounts cannot be self-registered")

        if await self.user_repo.get_by_email(user_data.email):
            raise DuplicateResourceError("User", user_data.email)

        try:
            user = await self.user_repo.create_user(user_data.model_dump())
        except ValueError as e:
            raise ValidationError(str(e))
        except Exception as e:
            logger.error(f"Failed to register user {user_data.email}: {e}")
            raise OperationFailedError("create account")

        logger.info(f"User registered: {user.email} (ID: {user.id}, role: {user.role.value})")
        return user

    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Create new access token from refresh token.

        Raises:
            InvalidTokenError: If refresh token is invalid
            TokenExpiredError: If refresh token is expired
            InactiveUserError: If user account is inactive
        """
        user = await self._user_from_token(refresh_token, token_type="refresh")
        return create_access_token(user_id=user.id, email=user.email, role=user.role)

    async def get_current_user(self, token: str) -> User:
        """Resolve the active user an access token belongs to."""
        return await self._user_from_token(token, token_type="access")

    async def _user_from_token(self, token: str, token_type: str) -> User:
        try:
            token_payload = verify_token(token, token_type=token_type)
            user_id = uuid.UUID(token_payload.user_id)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            raise InvalidTokenError(str(e))

        try:
            user = await self.user_repo.get_by_id(user_id)
        except Exception as e:
            logger.error(f"Failed to load user {user_id} for token: {e}")
            raise OperationFailedError("verify your session")

        if not user:
            raise InvalidTokenError("User no longer exists")

        if not user.is_active:
            raise InactiveUserError()

        return user
