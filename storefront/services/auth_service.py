"""Auth service - email/password sessions and role lookup.

Authentication itself is owned by the backend; this service keeps the
current session and exposes it to other services as an Actor.
"""

from dataclasses import dataclass

from storefront.core.permissions import Actor, RoleSet, role_set
from storefront.infra.logging import get_logger
from storefront.services.backend_client import BackendClient, BackendError

logger = get_logger(__name__)


class AuthError(Exception):
    """Raised with the backend's own message for failed auth calls."""


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    email: str | None
    access_token: str
    refresh_token: str | None = None


class AuthService:
    """Holds the signed-in session and its role set."""

    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._session: AuthSession | None = None
        self._roles: RoleSet = frozenset()

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def roles(self) -> RoleSet:
        return self._roles

    @property
    def actor(self) -> Actor:
        """Current identity; anonymous when signed out."""
        if self._session is None:
            return Actor.anonymous()
        return Actor(user_id=self._session.user_id, roles=self._roles)

    async def sign_up(self, email: str, password: str, full_name: str) -> str | None:
        """Register a new account.

        Returns:
            New user id, or None when the backend withholds it pending
            email confirmation

        Raises:
            AuthError: With the backend's message (e.g. duplicate email)
        """
        try:
            body = await self._client.auth_post(
                "signup",
                {"email": email, "password": password, "data": {"full_name": full_name}},
            )
        except BackendError as e:
            logger.warning("Sign-up rejected", email=email, error=e.message)
            raise AuthError(e.message) from e

        user = body.get("user") or body
        user_id = user.get("id")
        logger.info("User signed up", user_id=user_id)
        return user_id

    async def sign_in(self, email: str, password: str) -> Actor:
        """Sign in with email and password and load the user's roles.

        Raises:
            AuthError: With the backend's message (e.g. invalid credentials)
        """
        try:
            body = await self._client.auth_post(
                "token",
                {"email": email, "password": password},
                params={"grant_type": "password"},
            )
        except BackendError as e:
            logger.warning("Sign-in rejected", email=email, error=e.message)
            raise AuthError(e.message) from e

        user = body.get("user") or {}
        if not body.get("access_token") or not user.get("id"):
            raise AuthError("Sign-in response did not include a session")

        self._session = AuthSession(
            user_id=user["id"],
            email=user.get("email"),
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token"),
        )
        self._client.set_access_token(self._session.access_token)

        try:
            self._roles = await self._fetch_roles(self._session.user_id)
        except BackendError:
            self._clear()
            raise

        logger.info(
            "User signed in",
            user_id=self._session.user_id,
            roles=sorted(role.value for role in self._roles),
        )
        return self.actor

    async def sign_out(self) -> None:
        """End the session. Local state is cleared even if the backend call fails."""
        if self._session is None:
            return

        user_id = self._session.user_id
        try:
            await self._client.auth_post("logout")
        except BackendError as e:
            raise AuthError(e.message) from e
        finally:
            self._clear()
            logger.info("User signed out", user_id=user_id)

    async def refresh_roles(self) -> RoleSet:
        """Reload the role set for the signed-in user."""
        if self._session is None:
            return frozenset()
        self._roles = await self._fetch_roles(self._session.user_id)
        return self._roles

    async def _fetch_roles(self, user_id: str) -> RoleSet:
        rows = await self._client.select(
            self._client.table("user_roles").select("role").eq("user_id", user_id)
        )
        return role_set(row["role"] for row in rows if "role" in row)

    def _clear(self) -> None:
        self._session = None
        self._roles = frozenset()
        self._client.set_access_token(None)
