"""Tests for sessions and role lookup."""

from unittest.mock import AsyncMock

import pytest

from storefront.core.permissions import AppRole
from storefront.services.auth_service import AuthError, AuthService
from storefront.services.backend_client import BackendError

TOKEN_BODY = {
    "access_token": "access-1",
    "refresh_token": "refresh-1",
    "user": {"id": "user-1", "email": "mona@example.com"},
}


@pytest.fixture
def service(backend: AsyncMock) -> AuthService:
    return AuthService(backend)


class TestSignUp:
    @pytest.mark.asyncio
    async def test_sends_full_name(self, service: AuthService, backend: AsyncMock):
        backend.auth_post.return_value = {"user": {"id": "user-1"}}

        user_id = await service.sign_up("mona@example.com", "secret", "Mona Adel")

        assert user_id == "user-1"
        path, payload = backend.auth_post.await_args.args
        assert path == "signup"
        assert payload["data"] == {"full_name": "Mona Adel"}

    @pytest.mark.asyncio
    async def test_backend_message_surfaces(self, service: AuthService, backend: AsyncMock):
        backend.auth_post.side_effect = BackendError("User already registered", status_code=422)

        with pytest.raises(AuthError, match="User already registered"):
            await service.sign_up("mona@example.com", "secret", "Mona Adel")


class TestSignIn:
    """Tests for AuthService.sign_in."""

    @pytest.mark.asyncio
    async def test_loads_roles(self, service: AuthService, backend: AsyncMock):
        backend.auth_post.return_value = TOKEN_BODY
        backend.select.return_value = [{"role": "admin"}, {"role": "customer"}, {"role": "ghost"}]

        actor = await service.sign_in("mona@example.com", "secret")

        assert actor.user_id == "user-1"
        assert actor.roles == frozenset({AppRole.ADMIN, AppRole.CUSTOMER})
        assert actor.is_staff
        assert service.session.access_token == "access-1"
        backend.set_access_token.assert_called_with("access-1")
        assert backend.auth_post.await_args.kwargs["params"] == {"grant_type": "password"}
        query = backend.select.await_args.args[0]
        assert query.table == "user_roles"
        assert query.filters == (("user_id", "eq.user-1"),)

    @pytest.mark.asyncio
    async def test_invalid_credentials(self, service: AuthService, backend: AsyncMock):
        backend.auth_post.side_effect = BackendError("Invalid login credentials", status_code=400)

        with pytest.raises(AuthError, match="Invalid login credentials"):
            await service.sign_in("mona@example.com", "wrong")

        assert service.session is None
        assert not service.actor.is_authenticated

    @pytest.mark.asyncio
    async def test_missing_session_in_response(self, service: AuthService, backend: AsyncMock):
        backend.auth_post.return_value = {"user": {"id": "user-1"}}

        with pytest.raises(AuthError):
            await service.sign_in("mona@example.com", "secret")

    @pytest.mark.asyncio
    async def test_role_fetch_failure_clears_session(self, service: AuthService, backend: AsyncMock):
        backend.auth_post.return_value = TOKEN_BODY
        backend.select.side_effect = BackendError("boom", status_code=500)

        with pytest.raises(BackendError):
            await service.sign_in("mona@example.com", "secret")

        assert service.session is None
        assert service.roles == frozenset()
        backend.set_access_token.assert_called_with(None)


class TestSignOut:
    @pytest.mark.asyncio
    async def test_clears_session(self, service: AuthService, backend: AsyncMock):
        backend.auth_post.return_value = TOKEN_BODY
        backend.select.return_value = [{"role": "manager"}]
        await service.sign_in("mona@example.com", "secret")
        backend.auth_post.return_value = {}

        await service.sign_out()

        assert backend.auth_post.await_args.args[0] == "logout"
        assert service.session is None
        assert not service.actor.is_staff

    @pytest.mark.asyncio
    async def test_clears_session_when_backend_fails(self, service: AuthService, backend: AsyncMock):
        backend.auth_post.return_value = TOKEN_BODY
        backend.select.return_value = []
        await service.sign_in("mona@example.com", "secret")
        backend.auth_post.side_effect = BackendError("network down")

        with pytest.raises(AuthError):
            await service.sign_out()

        assert service.session is None

    @pytest.mark.asyncio
    async def test_signed_out_is_noop(self, service: AuthService, backend: AsyncMock):
        await service.sign_out()

        backend.auth_post.assert_not_awaited()


class TestRefreshRoles:
    @pytest.mark.asyncio
    async def test_anonymous(self, service: AuthService, backend: AsyncMock):
        assert await service.refresh_roles() == frozenset()
        backend.select.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reloads(self, service: AuthService, backend: AsyncMock):
        backend.auth_post.return_value = TOKEN_BODY
        backend.select.return_value = []
        await service.sign_in("mona@example.com", "secret")
        backend.select.return_value = [{"role": "manager"}]

        assert await service.refresh_roles() == frozenset({AppRole.MANAGER})
        assert service.actor.is_staff
