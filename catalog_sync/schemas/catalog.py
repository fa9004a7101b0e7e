"""Catalog value schemas shared by the client, cache and state."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Product(BaseModel):
    """Immutable product value as served by the catalog API.

    Identity is ``id`` only. Wire names are camelCase.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: int = Field(description="Product identifier")
    title: str = Field(min_length=1, description="Display title")
    description: str = Field(default="", description="Long description")
    price: float = Field(ge=0.0, description="Unit price")
    discount_percentage: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        alias="discountPercentage",
        description="Discount in percent (0-100)",
    )
    rating: float = Field(default=0.0, description="Average rating")
    stock: int = Field(default=0, ge=0, description="Units in stock")
    brand: str = Field(default="", description="Brand name")
    category: str = Field(description="Category slug")
    thumbnail: str = Field(default="", description="Thumbnail URI")
    images: tuple[str, ...] = Field(default=(), description="Ordered image URIs")

    def to_wire(self) -> dict[str, Any]:
        """Dump in the API's camelCase shape (JSON-safe)."""
        return self.model_dump(mode="json", by_alias=True)


class Category(BaseModel):
    """Product category. ``slug`` is the stable lookup key."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    slug: str = Field(min_length=1)
    url: str = ""


class ProductPage(BaseModel):
    """Paginated list response."""

    model_config = ConfigDict(extra="ignore")

    products: list[Product] = Field(default_factory=list)
    total: int = 0
    skip: int = 0
    limit: int = 0


class ModeKind(str, Enum):
    """Mutually exclusive browsing contexts."""

    ALL = "all"
    CATEGORY = "category"
    SEARCH = "search"


class CatalogMode(BaseModel):
    """Active browsing mode.

    A single tagged value, so a category and a search query can never be
    active at the same time.
    """

    model_config = ConfigDict(frozen=True)

    kind: ModeKind = ModeKind.ALL
    selector: str | None = None

    @model_validator(mode="after")
    def _check_selector(self) -> "CatalogMode":
        if self.kind is ModeKind.ALL and self.selector is not None:
            raise ValueError("All mode takes no selector")
        if self.kind is not ModeKind.ALL and not self.selector:
            raise ValueError(f"{self.kind.value} mode requires a selector")
        return self

    @classmethod
    def all(cls) -> "CatalogMode":
        return cls()

    @classmethod
    def category(cls, slug: str) -> "CatalogMode":
        return cls(kind=ModeKind.CATEGORY, selector=slug)

    @classmethod
    def search(cls, query: str) -> "CatalogMode":
        return cls(kind=ModeKind.SEARCH, selector=query)

    @property
    def selected_category(self) -> str | None:
        return self.selector if self.kind is ModeKind.CATEGORY else None

    @property
    def search_query(self) -> str:
        if self.kind is ModeKind.SEARCH:
            return self.selector or ""
        return ""


class ProductSection(BaseModel):
    """A titled group of products ready for display."""

    title: str
    products: list[Product]


class CatalogSnapshot(BaseModel):
    """Read-only view of the catalog state handed to the UI layer."""

    model_config = ConfigDict(frozen=True)

    mode: ModeKind
    selected_category: str | None
    search_query: str
    all_products: list[Product]
    products_by_category: dict[str, list[Product]]
    categories: list[Category]
    sections: list[ProductSection]
    current_page: int
    has_more: bool
    loading: bool
    refreshing: bool
    error: str | None
    error_kind: str | None
    revision: int
