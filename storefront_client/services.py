from __future__ import annotations

from storefront_client.models import Product, ProductFilters
from storefront_client.repository import EcommerceRepository
from storefront_client.result import Result


class StorefrontService:
    def __init__(self, repository: EcommerceRepository, request_timeout_seconds: int):
        self._repository = repository
        self._request_timeout_seconds = request_timeout_seconds

    @property
    def request_timeout_seconds(self) -> int:
        return self._request_timeout_seconds

    @property
    def kind(self) -> str:
        return self._repository.provider.kind

    def is_signed_in(self) -> bool:
        return self._repository.provider.session.is_authenticated

    def get_products(self, filters: ProductFilters | str | None = None) -> Result[list[Product]]:
        return self._repository.get_products(filters)

    def get_product_detail(self, slug: str) -> Result[Product]:
        return self._repository.get_product_detail(slug)

    def add_to_cart(self, product_id: str, quantity: int = 1) -> Result[bool]:
        return self._repository.add_to_cart(product_id, quantity)

    def place_order(self) -> Result[bool]:
        return self._repository.place_order()

    def sign_in(self, email: str, password: str) -> Result[str]:
        return self._repository.login(email, password)

    def sign_out(self) -> Result[None]:
        return self._repository.logout()
