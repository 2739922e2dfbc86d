from __future__ import annotations

import logging
import re
from typing import Any, Callable, TypeVar
from urllib.parse import urlparse

import requests

from storefront_client.auth import (
    CART_BOOTSTRAP,
    PERSIST,
    LoginOutcome,
    StepResult,
    read_auth_start,
    read_validation,
)
from storefront_client.config import COOKIE_SESSION, ConfigurationError, CookieSessionConfig
from storefront_client.http import ApiError, Dispatcher, SessionCookieAuth, error_message, read_json_body
from storefront_client.models import Product, ProductFilters
from storefront_client.providers.base import Provider, ProviderError, graphql_data, wrap_failure
from storefront_client.providers.mappers import map_cookie_session_product
from storefront_client.providers.queries import (
    COOKIE_SESSION_PRODUCT_DETAIL_QUERY,
    COOKIE_SESSION_PRODUCT_SEARCH_QUERY,
)
from storefront_client.session import AuthSession, SessionHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

API_HOST_TEMPLATE = "https://{account}.vtexcommercestable.com.br"
AUTH_START_PATH = "/api/vtexid/pub/authentication/start"
VALIDATE_PATH = "/api/vtexid/pub/authentication/classic/validate"
ORDER_FORM_PATH = "/api/checkout/pub/orderForm"

PRODUCT_PAGE_SUFFIX = "/p"
DEFAULT_PRICE_RANGE = "0 TO 999999999"
DEFAULT_SORT = "OrderByScoreDESC"
DEFAULT_SELLER = "1"

# Always sent, whatever the caller asked for.
FIXED_SEARCH_PARAMETERS = {
    "hideUnavailableItems": True,
    "skusFilter": "ALL_AVAILABLE",
    "installmentCriteria": "MAX_WITHOUT_INTEREST",
}

AUTH_EXPIRED_STATUS_CODES = (401, 403)

_ACCOUNT_PATTERN = re.compile(r"^(?:.*--)?([a-z0-9]+(?:-[a-z0-9]+)*)$", re.IGNORECASE)


def derive_account_name(store_url: str) -> str:
    """Account name from a store URL host.

    ``https://mystore.myvtex.com`` gives ``mystore``; workspace hosts such as
    ``https://dev--mystore.myvtex.com`` give the segment after the last ``--``.
    """
    host = urlparse(store_url).hostname or ""
    label = host.split(".", 1)[0] if "." in host else ""
    match = _ACCOUNT_PATTERN.match(label)
    if not match:
        raise ConfigurationError(
            f"Cannot derive the store account name from {store_url!r}; "
            "expected a URL like https://<account>.myvtex.com or https://<workspace>--<account>.myvtex.com"
        )
    return match.group(1).lower()


def normalize_slug(slug: str) -> str:
    normalized = slug.strip()
    while True:
        stripped = normalized.lstrip("/")
        if stripped.endswith(PRODUCT_PAGE_SUFFIX):
            stripped = stripped[: -len(PRODUCT_PAGE_SUFFIX)]
        if stripped == normalized:
            return normalized
        normalized = stripped


def build_search_variables(filters: ProductFilters) -> dict[str, Any]:
    variables: dict[str, Any] = {
        "selectedFacets": [{"key": facet.key, "value": facet.value} for facet in filters.facets],
        "priceRange": _format_price_range(filters.price_range),
        "orderBy": filters.sort or DEFAULT_SORT,
        "from": filters.from_index,
        "to": filters.to_index,
    }
    if filters.query:
        variables["fullText"] = filters.query
    variables.update(FIXED_SEARCH_PARAMETERS)
    return variables


def _format_price_range(price_range: tuple[float, float] | None) -> str:
    if price_range is None:
        return DEFAULT_PRICE_RANGE
    low, high = price_range
    return f"{_format_price(low)} TO {_format_price(high)}"


def _format_price(value: float) -> str:
    number = float(value)
    return str(int(number)) if number.is_integer() else str(number)


class CookieSessionProvider(Provider):
    """Session-cookie backend with a two-step login and account-bound carts."""

    kind = COOKIE_SESSION

    def __init__(
        self,
        config: CookieSessionConfig,
        session_handle: SessionHandle,
        session: AuthSession,
        *,
        timeout_seconds: int = 30,
        retry_attempts: int = 0,
        http_session: requests.Session | None = None,
    ):
        super().__init__(session)
        self._config = config
        self._session_handle = session_handle
        self._account = derive_account_name(config.base_url)
        self._api_base = API_HOST_TEMPLATE.format(account=self._account)

        self._dispatcher = Dispatcher(
            config.base_url,
            session,
            SessionCookieAuth(),
            default_params={"workspace": config.workspace},
            timeout_seconds=timeout_seconds,
            retry_attempts=retry_attempts,
            http_session=http_session,
        )

    @property
    def account(self) -> str:
        return self._account

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def auth_start_url(self) -> str:
        return f"{self._api_base}{AUTH_START_PATH}"

    @property
    def validate_url(self) -> str:
        return f"{self._api_base}{VALIDATE_PATH}"

    def order_form_url(self, order_form_id: str = "") -> str:
        url = f"{self._api_base}{ORDER_FORM_PATH}"
        return f"{url}/{order_form_id}" if order_form_id else url

    # -- catalog -----------------------------------------------------------

    def fetch_products(self, filters: ProductFilters | str | None = None) -> list[Product]:
        variables = build_search_variables(ProductFilters.coerce(filters))
        try:
            response = self._authorized(
                lambda: self._dispatcher.dispatch(
                    body={"query": COOKIE_SESSION_PRODUCT_SEARCH_QUERY, "variables": variables},
                )
            )
            search = graphql_data(response).get("productSearch") or {}
        except Exception as exc:
            raise wrap_failure("fetch products", exc) from exc

        raw_products = search.get("products") if isinstance(search, dict) else None
        return [map_cookie_session_product(raw) for raw in raw_products or []]

    def fetch_product_detail(self, slug: str) -> Product | None:
        variables = {"slug": normalize_slug(slug)}
        try:
            response = self._authorized(
                lambda: self._dispatcher.dispatch(
                    body={"query": COOKIE_SESSION_PRODUCT_DETAIL_QUERY, "variables": variables},
                )
            )
            raw_product = graphql_data(response).get("product")
        except Exception as exc:
            raise wrap_failure("fetch product", exc) from exc

        if not raw_product:
            return None
        return map_cookie_session_product(raw_product)

    # -- login -------------------------------------------------------------

    def login(self, email: str, password: str) -> str:
        try:
            outcome = self.authenticate(email, password)
        except Exception as exc:
            raise wrap_failure("login", exc) from exc
        return outcome.raise_for_failure()

    def authenticate(self, email: str, password: str) -> LoginOutcome:
        """Run the login protocol and report how far it got.

        Nothing is written to the credential store unless both remote
        steps succeed. The cart bootstrap that follows is best effort.
        """
        steps: list[StepResult] = []

        start_response = self._dispatcher.send(
            self.auth_start_url,
            "POST",
            form={"scope": self._account},
            authenticated=False,
            retry=False,
        )
        start = read_auth_start(
            start_response.status_code,
            read_json_body(start_response),
            _failure_message(start_response),
        )
        steps.append(start)
        if not start.ok:
            logger.warning("Login for account %s stopped at %s: %s", self._account, start.step, start.error)
            return LoginOutcome(tuple(steps))

        validate_response = self._dispatcher.send(
            self.validate_url,
            "POST",
            form={"login": email, "password": password, "recaptcha": ""},
            headers={"Cookie": f"_vss={start.value}"},
            authenticated=False,
            retry=False,
        )
        validation = read_validation(
            validate_response.status_code,
            read_json_body(validate_response),
            _failure_message(validate_response),
        )
        steps.append(validation)
        if not validation.ok:
            logger.warning("Login for account %s stopped at %s: %s", self._account, validation.step, validation.error)
            return LoginOutcome(tuple(steps))

        token = validation.value or ""
        try:
            self._session.save_token(token)
        except OSError as exc:
            steps.append(StepResult(PERSIST, error=exc))
            return LoginOutcome(tuple(steps))
        steps.append(StepResult(PERSIST, value=self._session.token_key))
        logger.info("Signed in to account %s", self._account)

        cart = self._bootstrap_cart()
        steps.append(cart)
        return LoginOutcome(tuple(steps), token=token, order_form_id=cart.value)

    def _bootstrap_cart(self) -> StepResult:
        try:
            # Cart failures during login never reach the session handle.
            order_form_id = self._fetch_order_form(self._session.order_form_id() or "", on_expiry=False)
        except Exception as exc:
            logger.warning("Cart session could not be created after login: %s", exc)
            return StepResult(CART_BOOTSTRAP, error=exc, required=False)
        return StepResult(CART_BOOTSTRAP, value=order_form_id, required=False)

    # -- cart --------------------------------------------------------------

    def ensure_cart_session(self) -> str:
        order_form_id = self._session.order_form_id()
        if order_form_id:
            return order_form_id
        return self._fetch_order_form("")

    def add_to_cart(self, product_id: str, quantity: int) -> bool:
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

        try:
            order_form_id = self.ensure_cart_session()
            self._authorized(
                lambda: self._dispatcher.request(
                    f"{self.order_form_url(order_form_id)}/items",
                    "POST",
                    json_body={
                        "orderItems": [
                            {"id": product_id, "quantity": quantity, "seller": DEFAULT_SELLER},
                        ]
                    },
                    retry=False,
                )
            )
        except Exception as exc:
            raise wrap_failure("add item to cart", exc) from exc

        logger.info("Added %s x%d to order form %s", product_id, quantity, order_form_id)
        return True

    def place_order(self) -> bool:
        order_form_id = self._session.order_form_id()
        if not order_form_id:
            logger.warning("No cart session for account %s; nothing to place", self._account)
            return False
        # The order form is reported as placed; no checkout transaction is sent.
        logger.info("Placing order for order form %s", order_form_id)
        return True

    def _fetch_order_form(self, order_form_id: str, *, on_expiry: bool = True) -> str:
        def fetch() -> Any:
            return self._dispatcher.request(self.order_form_url(order_form_id), "GET")

        response = self._authorized(fetch) if on_expiry else fetch()
        new_id = response.get("orderFormId") if isinstance(response, dict) else None
        if not isinstance(new_id, str) or not new_id:
            raise ProviderError("Order form response did not include an orderFormId")

        self._session.save_order_form_id(new_id)
        return new_id

    # -- session expiry ----------------------------------------------------

    def _authorized(self, call: Callable[[], T]) -> T:
        try:
            return call()
        except ApiError as exc:
            if exc.status_code not in AUTH_EXPIRED_STATUS_CODES or not self._session.is_authenticated:
                raise
            logger.info("Session rejected with HTTP %d; trying to revalidate", exc.status_code)
            if self._session_handle.revalidate():
                return call()
            self._session_handle.invalidate()
            raise


def _failure_message(response: requests.Response) -> str:
    return "" if response.ok else error_message(response)
