from __future__ import annotations

import logging
from typing import Callable, TypeVar

from storefront_client.models import Product, ProductFilters
from storefront_client.providers.base import Provider
from storefront_client.result import Err, Ok, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

PRODUCT_NOT_FOUND = "Product not found"


class RepositoryError(RuntimeError):
    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class EcommerceRepository:
    """Turns provider calls into ``Result`` values.

    No exception escapes this class. A product detail lookup with no match
    comes back as an ``Err`` like any other failure.
    """

    def __init__(self, provider: Provider):
        self._provider = provider

    @property
    def provider(self) -> Provider:
        return self._provider

    def get_products(self, filters: ProductFilters | str | None = None) -> Result[list[Product]]:
        return self._run("Failed to fetch products", lambda: self._provider.fetch_products(filters))

    def get_product_detail(self, slug: str) -> Result[Product]:
        try:
            product = self._provider.fetch_product_detail(slug)
        except Exception as exc:
            return self._failure("Failed to fetch product detail", exc)

        if product is None:
            return Err(RepositoryError(PRODUCT_NOT_FOUND))
        return Ok(product)

    def add_to_cart(self, product_id: str, quantity: int) -> Result[bool]:
        return self._run("Failed to add item to cart", lambda: self._provider.add_to_cart(product_id, quantity))

    def place_order(self) -> Result[bool]:
        return self._run("Failed to place order", self._provider.place_order)

    def login(self, email: str, password: str) -> Result[str]:
        return self._run("Failed to login", lambda: self._provider.login(email, password))

    def logout(self) -> Result[None]:
        return self._run("Failed to logout", self._provider.logout)

    def _run(self, prefix: str, call: Callable[[], T]) -> Result[T]:
        try:
            return Ok(call())
        except Exception as exc:
            return self._failure(prefix, exc)

    @staticmethod
    def _failure(prefix: str, exc: Exception) -> Err:
        logger.debug("%s", prefix, exc_info=exc)
        cause = getattr(exc, "cause", None) or exc
        return Err(RepositoryError(f"{prefix}: {exc}", cause=cause))
