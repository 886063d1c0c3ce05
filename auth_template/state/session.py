"""
Session controller.

Single owner of the current-user snapshot. ``refresh`` coalesces concurrent
callers onto one ``GET /auth/me``; all other code reads the snapshot.
"""

import asyncio
from typing import Callable, List, Optional

from requests import RequestException

from auth_template.api import auth_client
from auth_template.api.errors import ApiError
from auth_template.api.http_client import ApiClient, consume_task_exception
from auth_template.api.schemas import AuthUser
from auth_template.state.notifications import NotificationCenter, NotificationType
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

SessionListener = Callable[[Optional[AuthUser]], None]


class SessionController:
    """
    Who is logged in, and whether the first session check is still running.

    Only this object writes ``user``; listeners are told about every write.
    """

    def __init__(self, client: ApiClient):
        self.client = client
        self._user: Optional[AuthUser] = None
        self._is_loading = True
        self._refresh_task: Optional[asyncio.Task] = None
        self._listeners: List[SessionListener] = []

    @property
    def user(self) -> Optional[AuthUser]:
        return self._user

    @property
    def is_logged_in(self) -> bool:
        return self._user is not None

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def set_user(self, user: Optional[AuthUser]) -> None:
        """Replace the user snapshot without a round trip."""
        self._user = user

        for listener in list(self._listeners):
            listener(user)

    async def refresh(self, *, throw_on_error: bool = False) -> None:
        """
        Reload the current user from the server.

        A call made while another is in flight waits for that one instead of
        issuing a second request. Any failure clears the user.

        Args:
            throw_on_error: Re-raise the failure after clearing the user.
        """
        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._load_current_user())
            self._refresh_task.add_done_callback(consume_task_exception)

        try:
            await asyncio.shield(self._refresh_task)
        except Exception:
            if throw_on_error:
                raise

    async def _load_current_user(self) -> None:
        try:
            user = await auth_client.get_current_user(client=self.client)
            self.set_user(user)
        except Exception:
            logger.debug("Current user unavailable; clearing session")
            self.set_user(None)
            raise
        finally:
            self._refresh_task = None

    async def bootstrap(self) -> None:
        """First session check on app start. Being anonymous is not an error."""
        self._is_loading = True

        try:
            await self.refresh()
        finally:
            self._is_loading = False

        logger.info(
            "Session bootstrap complete",
            extra={"logged_in": self.is_logged_in},
        )

    async def log_in(self, email: str, password: str, remember_me: bool = False) -> AuthUser:
        """
        Log in and load the resulting user.

        Raises:
            ApiError: Credentials rejected or user could not be loaded.
        """
        await auth_client.log_in(
            client=self.client,
            email=email,
            password=password,
            remember_me=remember_me,
        )
        await self.refresh(throw_on_error=True)
        return self._user

    async def log_out(self, notifications: NotificationCenter) -> bool:
        """
        Log out on the server, then clear the local session.

        A failed logout leaves the session as it was and posts an error
        notification.

        Returns:
            bool: True when the server accepted the logout.
        """
        try:
            result = await auth_client.log_out(client=self.client)
        except (ApiError, RequestException) as exc:
            logger.warning("Logout failed", extra={"error": str(exc)})
            notifications.add(
                "Unable to log out. Please try again.",
                type=NotificationType.ERROR,
                title="Logout failed",
            )
            return False

        self.set_user(None)
        notifications.add(result.message, type=NotificationType.SUCCESS)
        return True
