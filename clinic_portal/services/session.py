"""Session holder for the currently authenticated user."""

import structlog
from pydantic import ValidationError

from clinic_portal.core.exceptions import OperationInProgressException
from clinic_portal.core.storage import TOKEN_KEY, USER_KEY, KeyValueStore
from clinic_portal.schemas.users import LoginCredentials, LoginResponse, User, UserUpdate
from clinic_portal.services.user_service import UserService

logger = structlog.get_logger(__name__)


class SessionManager:
    """
    Single owner of "who is logged in" for one process.

    Every mutation writes through to the store so the session survives a
    restart. Profile updates replace the current user with the record the
    backend echoes back; the submitted patch is never merged locally.
    """

    def __init__(self, users: UserService, store: KeyValueStore):
        """Initialize session with user service and persistence store."""
        self.users = users
        self.store = store
        self._user: User | None = None
        self._loading = True
        self._updating = False

    @property
    def loading(self) -> bool:
        """True until ``initialize`` has run."""
        return self._loading

    @property
    def current_user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def is_updating(self) -> bool:
        """True while a profile update is in flight."""
        return self._updating

    def get_current_user(self) -> User | None:
        """Get the in-memory user, or None when logged out."""
        return self._user

    def initialize(self) -> User | None:
        """
        Restore the persisted user, if any.

        A record that no longer parses is discarded and treated as no
        session.

        Returns:
            Restored user or None
        """
        stored = self.store.get_json(USER_KEY)
        self._user = None

        if stored is not None:
            try:
                self._user = User.model_validate(stored)
            except ValidationError as e:
                logger.warning("session_restore_failed", error=str(e))
                self.store.delete(USER_KEY)

        self._loading = False
        logger.info(
            "session_initialized",
            authenticated=self._user is not None,
            user_id=self._user.id if self._user else None,
        )
        return self._user

    def _persist_user(self, user: User) -> None:
        record = user.model_dump(mode="json", by_alias=True, exclude_unset=True)
        self.store.set_json(USER_KEY, record)

    async def login(self, credentials: LoginCredentials) -> LoginResponse:
        """
        Log in and make the returned user current.

        Args:
            credentials: Username and password

        Returns:
            Backend login response

        Raises:
            ApiException: Propagated untouched; prior state is kept
        """
        response = await self.users.login(credentials)

        self._user = response.user
        self._persist_user(response.user)
        if response.token:
            self.store.set_json(TOKEN_KEY, response.token)

        logger.info("session_login", user_id=response.user.id, username=response.user.username)
        return response

    def logout(self) -> None:
        """Forget the current user. No network call is made."""
        user_id = self._user.id if self._user else None
        self._user = None
        self.store.delete(USER_KEY)
        self.store.delete(TOKEN_KEY)
        logger.info("session_logout", user_id=user_id)

    async def update_profile(self, user_id: int, patch: UserUpdate) -> User:
        """
        Send a profile patch and adopt the backend's record.

        Args:
            user_id: ID of the user to update
            patch: Partial update

        Returns:
            Updated user as returned by the backend

        Raises:
            OperationInProgressException: If another update is still in flight
            ApiException: Propagated untouched; prior state is kept
        """
        if self._updating:
            raise OperationInProgressException("A profile update is already in progress")

        self._updating = True
        try:
            updated = await self.users.update_user(user_id, patch)
        finally:
            self._updating = False

        self._user = updated
        self._persist_user(updated)
        logger.info("session_profile_updated", user_id=updated.id)
        return updated
