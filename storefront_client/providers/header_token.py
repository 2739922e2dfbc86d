from __future__ import annotations

import logging
from typing import Any

import requests

from storefront_client.config import HEADER_TOKEN, HeaderTokenConfig
from storefront_client.http import BearerTokenAuth, Dispatcher
from storefront_client.models import Product, ProductFilters
from storefront_client.providers.base import Provider, graphql_data, wrap_failure
from storefront_client.providers.mappers import map_header_token_product
from storefront_client.providers.queries import (
    HEADER_TOKEN_PRODUCT_DETAIL_QUERY,
    HEADER_TOKEN_PRODUCTS_QUERY,
)
from storefront_client.session import AuthSession

logger = logging.getLogger(__name__)


class HeaderTokenProvider(Provider):
    """Storefront GraphQL backend authenticated by a static access token."""

    kind = HEADER_TOKEN

    def __init__(
        self,
        config: HeaderTokenConfig,
        session: AuthSession,
        *,
        timeout_seconds: int = 30,
        retry_attempts: int = 0,
        http_session: requests.Session | None = None,
    ):
        super().__init__(session)
        self._config = config
        self._dispatcher = Dispatcher(
            config.base_url,
            session,
            BearerTokenAuth(config.access_token),
            timeout_seconds=timeout_seconds,
            retry_attempts=retry_attempts,
            http_session=http_session,
        )

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def fetch_products(self, filters: ProductFilters | str | None = None) -> list[Product]:
        filters = ProductFilters.coerce(filters)
        variables: dict[str, Any] = {"first": filters.page_size}
        if filters.query:
            variables["query"] = filters.query
        if filters.after:
            variables["after"] = filters.after

        try:
            response = self._dispatcher.dispatch(
                body={"query": HEADER_TOKEN_PRODUCTS_QUERY, "variables": variables},
            )
            products = graphql_data(response).get("products") or {}
        except Exception as exc:
            raise wrap_failure("fetch products", exc) from exc

        edges = products.get("edges") if isinstance(products, dict) else None
        return [
            map_header_token_product(edge.get("node") if isinstance(edge, dict) else None)
            for edge in edges or []
        ]

    def fetch_product_detail(self, slug: str) -> Product | None:
        try:
            response = self._dispatcher.dispatch(
                body={"query": HEADER_TOKEN_PRODUCT_DETAIL_QUERY, "variables": {"handle": slug}},
            )
            raw_product = graphql_data(response).get("product")
        except Exception as exc:
            raise wrap_failure("fetch product", exc) from exc

        if not raw_product:
            return None
        return map_header_token_product(raw_product)

    def login(self, email: str, password: str) -> str:
        # Requests are authorized by the static storefront token alone.
        logger.debug("Login is a no-op for the %s backend", self.kind)
        return ""

    def add_to_cart(self, product_id: str, quantity: int) -> bool:
        logger.info("Adding product %s (quantity %d) to the %s cart", product_id, quantity, self.kind)
        return True

    def place_order(self) -> bool:
        logger.info("Placing order on the %s backend", self.kind)
        return True
