from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import storage.database as database
from api.client import ApiClient
from store.cart import Cart
from store.session import Session
from utils.config import Settings


@dataclass
class ShopState:
    """
    Everything the screens share, built once in main and handed to the app.

    Fields:
      - settings: runtime settings
      - session: current identity, hydrated at startup
      - cart: the session local cart
      - client: API client, reading its bearer token from session
    """

    settings: Settings
    session: Session = field(default_factory=Session)
    cart: Optional[Cart] = None
    client: Optional[ApiClient] = None

    def __post_init__(self) -> None:
        if self.cart is None:
            self.cart = Cart(merge_lines=self.settings.cart_merge_lines)
        if self.client is None:
            self.client = ApiClient(
                self.settings.api_url,
                token_getter=lambda: self.session.token,
                timeout=self.settings.api_timeout,
            )

    @classmethod
    def build(cls, settings: Optional[Settings] = None) -> "ShopState":
        settings = settings or Settings.from_env()
        database.DB_PATH = settings.db_path
        return cls(settings=settings)

    @property
    def is_admin(self) -> bool:
        return self.session.is_admin

    async def start(self) -> bool:
        """Restore the persisted session, True when someone is logged in."""
        return await self.session.hydrate()

    async def end_session(self) -> None:
        """Logout: forget the identity and empty the cart."""
        await self.session.clear()
        self.cart.clear()
