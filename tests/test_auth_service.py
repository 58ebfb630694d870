"""
Tests for AuthService and the JWT helpers.
"""

import uuid
from datetime import timedelta

import pytest

from realty.models.user import User, UserRole
from realty.schemas.user import UserCreate
from realty.services.auth import AuthService
from realty.utils.auth import create_access_token, create_refresh_token, verify_token
from realty.utils.exceptions import (
    DuplicateResourceError,
    ForbiddenError,
    InactiveUserError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    ValidationError
)
from tests.conftest import TEST_PASSWORD


class TestAuthService:

    @pytest.mark.asyncio
    async def test_authenticate_user_success(self, auth_service: AuthService, test_agent: User):
        user = await auth_service.authenticate_user(test_agent.email, TEST_PASSWORD)
        assert user.id == test_agent.id

    @pytest.mark.asyncio
    async def test_authenticate_user_invalid_credentials(self, auth_service: AuthService, test_agent: User):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.authenticate_user(test_agent.email, "wrongpassword")

        with pytest.raises(InvalidCredentialsError):
            await auth_service.authenticate_user("nobody@test.com", TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_authenticate_user_inactive(self, auth_service: AuthService, test_inactive_user: User):
        with pytest.raises(InactiveUserError):
            await auth_service.authenticate_user(test_inactive_user.email, TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_authenticate_user_empty_fields(self, auth_service: AuthService):
        with pytest.raises(ValidationError):
            await auth_service.authenticate_user("  ", TEST_PASSWORD)
        with pytest.raises(ValidationError):
            await auth_service.authenticate_user("someone@test.com", "")

    @pytest.mark.asyncio
    async def test_register_user(self, auth_service: AuthService):
        user = await auth_service.register_user(UserCreate(
            email="Buyer@Test.com",
            full_name="New Buyer",
            password="buyerpass1"
        ))

        assert user.email == "buyer@test.com"
        assert user.role == UserRole.USER
        assert user.verify_password("buyerpass1")

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, auth_service: AuthService, test_user: User):
        with pytest.raises(DuplicateResourceError):
            await auth_service.register_user(UserCreate(
                email=test_user.email,
                full_name="Copy Cat",
                password="copycat123"
            ))

    @pytest.mark.asyncio
    async def test_register_admin_forbidden(self, auth_service: AuthService):
        with pytest.raises(ForbiddenError):
            await auth_service.register_user(UserCreate(
                email="boss@test.com",
                full_name="Would-be Admin",
                password="adminpass1",
                role=UserRole.ADMIN
            ))

    @pytest.mark.asyncio
    async def test_login_and_refresh(self, auth_service: AuthService, test_user: User):
        user, access_token, refresh_token = await auth_service.login(test_user.email, TEST_PASSWORD)

        assert (await auth_service.get_current_user(access_token)).id == user.id

        new_access_token = await auth_service.refresh_access_token(refresh_token)
        assert verify_token(new_access_token).user_id == str(user.id)

    @pytest.mark.asyncio
    async def test_token_types_are_not_interchangeable(self, auth_service: AuthService, test_user: User):
        _, access_token, refresh_token = await auth_service.login(test_user.email, TEST_PASSWORD)

        with pytest.raises(InvalidTokenError):
            await auth_service.get_current_user(refresh_token)
        with pytest.raises(InvalidTokenError):
            await auth_service.refresh_access_token(access_token)

    @pytest.mark.asyncio
    async def test_expired_token(self, auth_service: AuthService, test_user: User):
        token = create_access_token(test_user.id, test_user.email, test_user.role, expires_delta=timedelta(seconds=-1))

        with pytest.raises(TokenExpiredError):
            await auth_service.get_current_user(token)

    @pytest.mark.asyncio
    async def test_token_for_deleted_user(self, auth_service: AuthService):
        token = create_access_token(uuid.uuid4(), "ghost@test.com", UserRole.USER)

        with pytest.raises(InvalidTokenError):
            await auth_service.get_current_user(token)

    @pytest.mark.asyncio
    async def test_garbage_token(self, auth_service: AuthService):
        with pytest.raises(InvalidTokenError):
            await auth_service.get_current_user("not.a.token")

    def test_refresh_token_has_no_role(self):
        payload = verify_token(create_refresh_token(uuid.uuid4(), "a@test.com"), token_type="refresh")
        assert payload.role is None
        assert payload.email == "a@test.com"
