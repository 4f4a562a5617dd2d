"""User endpoints of the booking backend."""

from urllib.parse import quote

from clinic_portal.schemas.users import (
    LoginCredentials,
    LoginResponse,
    User,
    UserRegister,
    UserUpdate,
)
from clinic_portal.services.api_client import ApiClient, decode, decode_list


class UserService:
    """Service for user operations."""

    def __init__(self, api: ApiClient):
        """Initialize service with API client."""
        self.api = api

    async def register(self, data: UserRegister) -> User:
        """
        Register a new user.

        Args:
            data: Registration form data

        Returns:
            Created user

        Raises:
            BadRequestException: If the username or email is taken
        """
        body = await self.api.post("/users/register", json=data.to_payload())
        return decode(User, body)

    async def login(self, credentials: LoginCredentials) -> LoginResponse:
        """
        Authenticate with username and password.

        Args:
            credentials: Login credentials

        Returns:
            Login response including the user record

        Raises:
            UnauthorizedException: If the credentials are rejected
        """
        body = await self.api.post("/users/login", json=credentials.to_payload())
        return decode(LoginResponse, body)

    async def get_user(self, user_id: int) -> User:
        """Get user by ID."""
        body = await self.api.get(f"/users/{user_id}")
        return decode(User, body)

    async def get_user_by_username(self, username: str) -> User:
        """Get user by username."""
        body = await self.api.get(f"/users/username/{quote(username, safe='')}")
        return decode(User, body)

    async def list_users(self) -> list[User]:
        """List all users."""
        body = await self.api.get("/users")
        return decode_list(User, body)

    async def update_user(self, user_id: int, data: UserUpdate) -> User:
        """
        Send a partial profile update.

        Args:
            user_id: User ID
            data: Fields to change

        Returns:
            The user record echoed by the backend
        """
        body = await self.api.put(f"/users/{user_id}", json=data.to_payload())
        return decode(User, body)

    async def delete_user(self, user_id: int) -> None:
        """Delete a user."""
        await self.api.delete(f"/users/{user_id}")
