from __future__ import annotations

import argparse
from dataclasses import asdict
import getpass
import json
import logging
import os
import sys
from typing import Any

from storefront_client.config import AppSettings, ConfigurationError
from storefront_client.credentials import FileCredentialStore
from storefront_client.logging_utils import configure_logging
from storefront_client.models import Facet, ProductFilters
from storefront_client.providers import create_provider
from storefront_client.repository import EcommerceRepository
from storefront_client.result import Result
from storefront_client.services import StorefrontService

logger = logging.getLogger(__name__)


class ConsoleSessionHandle:
    """Session handle for the command line.

    Revalidation signs in again with ``STOREFRONT_LOGIN_EMAIL`` and
    ``STOREFRONT_LOGIN_PASSWORD`` when both are set.
    """

    def __init__(self):
        self._service: StorefrontService | None = None

    def bind(self, service: StorefrontService) -> None:
        self._service = service

    def invalidate(self) -> None:
        if self._service is None:
            return
        logger.warning("Session expired; signing out")
        self._service.sign_out()

    def revalidate(self) -> bool:
        email = os.getenv("STOREFRONT_LOGIN_EMAIL", "").strip()
        password = os.getenv("STOREFRONT_LOGIN_PASSWORD", "")
        if self._service is None or not email or not password:
            return False
        return self._service.sign_in(email, password).is_ok


def build_service(settings: AppSettings, session_handle: ConsoleSessionHandle) -> StorefrontService:
    provider = create_provider(
        settings.backend,
        session_handle,
        FileCredentialStore(settings.credentials_path),
        timeout_seconds=settings.timeout_seconds,
        retry_attempts=settings.retry_attempts,
    )
    service = StorefrontService(
        EcommerceRepository(provider),
        request_timeout_seconds=settings.timeout_seconds,
    )
    session_handle.bind(service)
    return service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront-client", description="Storefront backend client")
    subparsers = parser.add_subparsers(dest="command", required=True)

    products = subparsers.add_parser("products", help="Search the catalog")
    products.add_argument("--query", default="")
    products.add_argument("--facet", action="append", default=[], metavar="KEY=VALUE")
    products.add_argument("--min-price", type=float)
    products.add_argument("--max-price", type=float)
    products.add_argument("--sort", default="")
    products.add_argument("--from", dest="from_index", type=int, default=0)
    products.add_argument("--to", dest="to_index", type=int, default=11)
    products.add_argument("--after", default=None)

    product = subparsers.add_parser("product", help="Show one product")
    product.add_argument("slug")

    login = subparsers.add_parser("login", help="Sign in")
    login.add_argument("email")
    login.add_argument("--password", default=None)

    subparsers.add_parser("logout", help="Sign out")
    subparsers.add_parser("status", help="Show the active backend and session")

    cart = subparsers.add_parser("add-to-cart", help="Add a product to the cart")
    cart.add_argument("product_id")
    cart.add_argument("--quantity", type=int, default=1)

    subparsers.add_parser("place-order", help="Place the current cart as an order")
    return parser


def filters_from_args(args: argparse.Namespace) -> ProductFilters:
    facets = []
    for raw in args.facet:
        key, separator, value = raw.partition("=")
        if not separator or not key.strip():
            raise ValueError(f"Facet must look like KEY=VALUE: {raw!r}")
        facets.append(Facet(key=key.strip(), value=value.strip()))

    price_range = None
    if args.min_price is not None or args.max_price is not None:
        price_range = (
            args.min_price if args.min_price is not None else 0.0,
            args.max_price if args.max_price is not None else 999999999.0,
        )

    return ProductFilters(
        query=args.query,
        facets=tuple(facets),
        price_range=price_range,
        sort=args.sort,
        from_index=args.from_index,
        to_index=args.to_index,
        after=args.after,
    )


def run_command(service: StorefrontService, args: argparse.Namespace) -> int:
    if args.command == "products":
        return _emit(service.get_products(filters_from_args(args)), lambda products: [asdict(p) for p in products])
    if args.command == "product":
        return _emit(service.get_product_detail(args.slug), asdict)
    if args.command == "login":
        password = args.password if args.password is not None else getpass.getpass("Password: ")
        return _emit(
            service.sign_in(args.email, password),
            lambda _token: {"signedIn": service.is_signed_in(), "email": _mask_username_domain(args.email)},
        )
    if args.command == "logout":
        return _emit(service.sign_out(), lambda _none: {"signedIn": False})
    if args.command == "status":
        _print_json({"backend": service.kind, "signedIn": service.is_signed_in()})
        return 0
    if args.command == "add-to-cart":
        return _emit(service.add_to_cart(args.product_id, args.quantity), lambda ok: {"added": ok})
    if args.command == "place-order":
        return _emit(service.place_order(), lambda ok: {"placed": ok})
    raise ValueError(f"Unknown command: {args.command}")


def _emit(result: Result[Any], render) -> int:
    def on_err(error: Exception) -> int:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    def on_ok(value: Any) -> int:
        _print_json(render(value))
        return 0

    return result.fold(on_err, on_ok)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _mask_username_domain(username: str) -> str:
    value = username.strip()
    if "@" not in value:
        return value

    local, domain = value.split("@", 1)
    if not domain:
        return value

    mask_count = min(6, len(domain))
    masked_domain = ("*" * mask_count) + domain[mask_count:]
    return f"{local}@{masked_domain}"


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = AppSettings.from_env()
    except ConfigurationError as exc:
        configure_logging()
        print(
            "Configuration error. Set the required environment variables and retry:\n\n"
            f"{exc}\n\n"
            "Required:\n"
            "- STOREFRONT_PROVIDER (header_token | cookie_session)\n"
            "- STOREFRONT_BASE_URL\n"
            "- STOREFRONT_ACCESS_TOKEN (header_token only)\n"
            "Or point STOREFRONT_CONFIG_FILE at a providers.json file.",
            file=sys.stderr,
        )
        return 2

    configure_logging(settings.log_level)
    try:
        service = build_service(settings, ConsoleSessionHandle())
        return run_command(service, args)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
