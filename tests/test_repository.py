import pytest

from storefront_client.auth import WrongCredentials
from storefront_client.credentials import InMemoryCredentialStore
from storefront_client.http import ApiError
from storefront_client.models import Product
from storefront_client.providers.base import Provider, ProviderError
from storefront_client.repository import PRODUCT_NOT_FOUND, EcommerceRepository, RepositoryError
from storefront_client.result import Err, Ok
from storefront_client.session import AuthSession

SHOES = Product(
    id="1",
    name="Shoes",
    description="",
    images=(),
    price=10.0,
    list_price=10.0,
    available=True,
    slug="shoes",
)


class StubProvider(Provider):
    kind = "stub"

    def __init__(self, detail=None, error=None, login_error=None):
        super().__init__(AuthSession(InMemoryCredentialStore({"stub:auth_token": "t"}), "stub"))
        self.detail = detail
        self.error = error
        self.login_error = login_error

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    def fetch_products(self, filters=None):
        self._maybe_fail()
        return [SHOES]

    def fetch_product_detail(self, slug):
        self._maybe_fail()
        return self.detail

    def add_to_cart(self, product_id, quantity):
        self._maybe_fail()
        return True

    def place_order(self):
        self._maybe_fail()
        return False

    def login(self, email, password):
        if self.login_error is not None:
            raise self.login_error
        return "token"


def test_success_becomes_ok():
    repository = EcommerceRepository(StubProvider(detail=SHOES))

    assert repository.get_products() == Ok([SHOES])
    assert repository.get_product_detail("shoes") == Ok(SHOES)
    assert repository.add_to_cart("1", 1) == Ok(True)
    assert repository.place_order() == Ok(False)
    assert repository.login("a@b.c", "x") == Ok("token")


def test_missing_product_detail_becomes_err():
    result = EcommerceRepository(StubProvider(detail=None)).get_product_detail("ghost")

    assert isinstance(result, Err)
    assert str(result.error) == PRODUCT_NOT_FOUND


def test_provider_failure_on_detail_becomes_err_never_ok_none():
    result = EcommerceRepository(StubProvider(error=ApiError(500, "boom"))).get_product_detail("shoes")

    assert result.is_err
    assert str(result.error) == "Failed to fetch product detail: boom"


@pytest.mark.parametrize(
    "call, prefix",
    [
        (lambda repo: repo.get_products(), "Failed to fetch products"),
        (lambda repo: repo.add_to_cart("1", 1), "Failed to add item to cart"),
        (lambda repo: repo.place_order(), "Failed to place order"),
    ],
)
def test_every_failure_is_prefixed_with_operation(call, prefix):
    result = call(EcommerceRepository(StubProvider(error=RuntimeError("kaput"))))

    assert isinstance(result, Err)
    assert isinstance(result.error, RepositoryError)
    assert str(result.error) == f"{prefix}: kaput"


def test_root_cause_survives_provider_wrapping():
    root = ApiError(503, "unavailable")
    provider_error = ProviderError("Failed to fetch products: unavailable", cause=root)

    result = EcommerceRepository(StubProvider(error=provider_error)).get_products()

    assert result.error.cause is root


def test_wrong_credentials_remain_distinguishable():
    result = EcommerceRepository(StubProvider(login_error=WrongCredentials())).login("a@b.c", "bad")

    assert isinstance(result.error.cause, WrongCredentials)
    assert str(result.error).startswith("Failed to login: ")


def test_logout_clears_session():
    provider = StubProvider()
    result = EcommerceRepository(provider).logout()

    assert result == Ok(None)
    assert provider.session.token() is None


def test_fold_dispatches_to_one_handler():
    ok = EcommerceRepository(StubProvider(detail=SHOES)).get_product_detail("shoes")
    err = EcommerceRepository(StubProvider()).get_product_detail("ghost")

    assert ok.fold(lambda e: "err", lambda p: p.name) == "Shoes"
    assert err.fold(lambda e: str(e), lambda p: "ok") == PRODUCT_NOT_FOUND


def test_results_refuse_truth_testing():
    with pytest.raises(TypeError):
        bool(Ok(False))
    with pytest.raises(TypeError):
        bool(Err(RuntimeError("x")))
