from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from storefront_client.models import Product, ProductFilters
from storefront_client.session import AuthSession


class ProviderError(RuntimeError):
    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class GraphQLError(ProviderError):
    pass


class Provider(ABC):
    """Uniform contract over one e-commerce backend.

    Product browsing and cart logic only ever talk to this interface; the
    provider factory is the only code that knows which variant is active.
    """

    kind: str = ""

    def __init__(self, session: AuthSession):
        self._session = session

    @property
    def session(self) -> AuthSession:
        return self._session

    @abstractmethod
    def fetch_products(self, filters: ProductFilters | str | None = None) -> list[Product]:
        ...

    @abstractmethod
    def fetch_product_detail(self, slug: str) -> Product | None:
        """Return the product for *slug*, or ``None`` when the backend has no match."""
        ...

    @abstractmethod
    def add_to_cart(self, product_id: str, quantity: int) -> bool:
        ...

    @abstractmethod
    def place_order(self) -> bool:
        ...

    @abstractmethod
    def login(self, email: str, password: str) -> str:
        ...

    def logout(self) -> None:
        self._session.clear()


def wrap_failure(operation: str, exc: Exception) -> ProviderError:
    return ProviderError(f"Failed to {operation}: {exc}", cause=exc)


def graphql_data(response: Any) -> dict[str, Any]:
    if not isinstance(response, dict):
        raise GraphQLError("GraphQL response is not a JSON object")

    data = response.get("data")
    errors = response.get("errors")
    if not isinstance(data, dict):
        if isinstance(errors, list) and errors:
            first = errors[0]
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise GraphQLError(f"GraphQL error: {message}")
        return {}
    return data
