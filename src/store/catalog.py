from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence

from api import endpoints
from api.client import ApiClient
from api.errors import ApiError
from api.models import Product
from store.sample_data import SAMPLE_PRODUCTS
from utils.logger import get_logger

_logger = get_logger(__name__)

ALL_CATEGORIES = "All Categories"

CATEGORIES = (
    ALL_CATEGORIES,
    "Peripheral",
    "Self-priming",
    "Centrifugal pumps",
    "Swimming pool",
    "Multi-usage",
    "DC dot booster pump",
    "Inverter automatic pump",
    "Automatic submersible pump",
    "Submersible sewage pump",
    "Solar pump",
)


class SortKey(str, Enum):
    NEWEST = "newest"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]


_SORT_LABELS = {
    SortKey.NEWEST: "Newest First",
    SortKey.PRICE_ASC: "Price: Low to High",
    SortKey.PRICE_DESC: "Price: High to Low",
}


@dataclass(frozen=True)
class LoadResult:
    products: List[Product]
    demo: bool = False


@dataclass(frozen=True)
class CatalogView:
    products: List[Product]  # what to render
    total: int  # size of the fetched set before the text filter
    demo: bool = False


def fetch_params(category: str, limit: int = 100) -> Dict[str, str]:
    """Query params for GET /products; All Categories means no category param."""
    params = {"limit": str(limit)}
    if category and category != ALL_CATEGORIES:
        params["category"] = category
    return params


def matches(product: Product, needle: str) -> bool:
    """needle must already be lowercased."""
    return (
        needle in product.name.lower()
        or needle in product.description.lower()
        or needle in product.category_name.lower()
    )


def apply(
    products: Sequence[Product],
    query: str = "",
    sort_key: SortKey | str = SortKey.NEWEST,
) -> List[Product]:
    """
    Text filter then sort, without touching the input.
    - blank query keeps everything
    - newest keeps the fetch order, the API already orders by recency
    - price sorts are stable, equal prices keep their relative order
    """
    result = list(products)

    needle = (query or "").strip().lower()
    if needle:
        result = [p for p in result if matches(p, needle)]

    sort_key = SortKey(sort_key)
    if sort_key is SortKey.PRICE_ASC:
        result.sort(key=lambda p: p.price)
    elif sort_key is SortKey.PRICE_DESC:
        # reverse=True keeps equal prices in input order
        result.sort(key=lambda p: p.price, reverse=True)
    return result


async def load_products(
    client: ApiClient, category: str = ALL_CATEGORIES, limit: int = 100
) -> LoadResult:
    """
    Fetch the category's products. Offline/demo mode: when the API fails or
    answers with something that is not a product list, the fixed sample
    catalog is returned instead and the result is flagged demo.
    """
    params = fetch_params(category, limit)
    try:
        products = await endpoints.list_products(
            client, limit=limit, category=params.get("category")
        )
    except ApiError as e:
        _logger.warning(f"Product fetch failed, showing demo catalog: {e}")
        return LoadResult(list(SAMPLE_PRODUCTS), demo=True)
    return LoadResult(products)


async def browse(
    client: ApiClient,
    query: str = "",
    category: str = ALL_CATEGORIES,
    sort_key: SortKey | str = SortKey.NEWEST,
    limit: int = 100,
) -> CatalogView:
    loaded = await load_products(client, category, limit)
    return CatalogView(
        products=apply(loaded.products, query, sort_key),
        total=len(loaded.products),
        demo=loaded.demo,
    )
