import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return val.strip().lower() not in ("0", "false", "no", "off")


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings, read from the environment once at startup.

    Fields:
      - api_url: base url of the storefront REST API
      - api_timeout: per request timeout in seconds
      - db_path: sqlite file holding the persisted token/user
      - cart_merge_lines: True merges repeated adds of a product into one line,
        False keeps one line per add
      - product_limit: page size asked from GET /products
      - log_file: if set, log output goes there instead of the terminal
    """

    api_url: str = "http://localhost:5000/api"
    api_timeout: float = 10.0
    db_path: str = "data/shop.sqlite"
    cart_merge_lines: bool = True
    product_limit: int = 100
    log_file: str | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_url=os.getenv("SHOP_API_URL", cls.api_url).rstrip("/"),
            api_timeout=float(os.getenv("SHOP_API_TIMEOUT", cls.api_timeout)),
            db_path=os.getenv("SHOP_DB_PATH", cls.db_path),
            cart_merge_lines=_env_bool("SHOP_CART_MERGE_LINES", cls.cart_merge_lines),
            product_limit=int(os.getenv("SHOP_PRODUCT_LIMIT", cls.product_limit)),
            log_file=os.getenv("SHOP_LOG_FILE") or None,
        )
