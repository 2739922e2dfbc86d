from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    images: tuple[str, ...]
    price: float
    list_price: float
    available: bool
    slug: str = ""


@dataclass(frozen=True)
class Facet:
    key: str
    value: str


@dataclass(frozen=True)
class ProductFilters:
    query: str = ""
    facets: tuple[Facet, ...] = ()
    price_range: tuple[float, float] | None = None
    sort: str = ""
    from_index: int = 0
    to_index: int = 11
    after: str | None = None

    @property
    def page_size(self) -> int:
        return max(1, self.to_index - self.from_index + 1)

    @staticmethod
    def coerce(value: "ProductFilters | str | None") -> "ProductFilters":
        if value is None:
            return ProductFilters()
        if isinstance(value, str):
            return ProductFilters(query=value)
        return value
