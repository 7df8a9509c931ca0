from __future__ import annotations

import json
from typing import Callable, List, Optional

from api import endpoints
from api.client import ApiClient
from api.models import UserIdentity
from storage import local_store
from utils.logger import get_logger

_logger = get_logger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class Session:
    """
    The currently authenticated identity and its token.

    One instance is created at startup and handed to whatever needs it.
    Lifecycle: hydrate() once at startup, establish() on login/register,
    clear() on logout. token and user are persisted together and always
    cleared together.
    """

    def __init__(self) -> None:
        self.token: Optional[str] = None
        self.user: Optional[UserIdentity] = None
        self._listeners: List[Callable[[Session], None]] = []

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    def subscribe(self, callback: Callable[[Session], None]) -> Callable[[], None]:
        """Returns a function that removes the subscription again."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self)

    async def hydrate(self) -> bool:
        """
        Restore the session from the local store.
        Anything incomplete or unparsable is wiped and treated as logged out.
        """
        token = await local_store.get_item(TOKEN_KEY)
        raw_user = await local_store.get_item(USER_KEY)

        user = None
        if token and raw_user:
            try:
                user = UserIdentity.from_json(json.loads(raw_user))
            except (ValueError, KeyError, TypeError):
                _logger.warning("Stored user is malformed, clearing session.")

        if user is None:
            await local_store.remove_item(TOKEN_KEY, USER_KEY)
            self.token, self.user = None, None
        else:
            self.token, self.user = token, user
            _logger.info(f"Session restored for {user.email}.")
        self._notify()
        return self.is_authenticated

    async def establish(self, token: str, user: UserIdentity) -> None:
        await local_store.set_item(TOKEN_KEY, token)
        await local_store.set_item(USER_KEY, json.dumps(user.to_json()))
        self.token, self.user = token, user
        self._notify()

    async def clear(self) -> None:
        await local_store.remove_item(TOKEN_KEY, USER_KEY)
        self.token, self.user = None, None
        self._notify()


async def login(
    client: ApiClient, session: Session, email: str, password: str
) -> UserIdentity:
    result = await endpoints.login(client, email, password)
    await session.establish(result.token, result.user)
    _logger.info(f"Logged in as {result.user.email} ({result.user.role}).")
    return result.user


async def register(
    client: ApiClient, session: Session, name: str, email: str, password: str
) -> UserIdentity:
    result = await endpoints.register(client, name, email, password)
    await session.establish(result.token, result.user)
    _logger.info(f"Registered {result.user.email}.")
    return result.user
