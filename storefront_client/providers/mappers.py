"""Raw catalog payloads -> ``Product``.

Mappers never raise. A missing or mistyped field degrades to an empty
string, zero, ``False`` or an empty image tuple.
"""
from __future__ import annotations

import math
from typing import Any

from storefront_client.models import Product


def map_cookie_session_product(raw: Any) -> Product:
    product = _as_dict(raw)
    items = _as_list(product.get("items"))
    first_item = _as_dict(items[0]) if items else {}

    images = tuple(
        url
        for url in (_as_str(_as_dict(image).get("imageUrl")) for image in _as_list(first_item.get("images")))
        if url
    )

    sellers = [_as_dict(seller) for seller in _as_list(first_item.get("sellers"))]
    main_seller = next((seller for seller in sellers if seller.get("sellerDefault") is True), None)
    if main_seller is None and sellers:
        main_seller = sellers[0]
    offer = _as_dict((main_seller or {}).get("commertialOffer"))

    price = _as_number(offer.get("Price"))
    list_price = _as_number(offer.get("ListPrice")) or price
    available = _as_number(offer.get("AvailableQuantity")) > 0

    return Product(
        id=_as_str(product.get("productId")),
        name=_as_str(product.get("productName")),
        description=_as_str(product.get("description")),
        images=images,
        price=price,
        list_price=list_price,
        available=available,
        slug=_as_str(product.get("linkText")) or _as_str(product.get("link")),
    )


def map_header_token_product(raw: Any) -> Product:
    product = _as_dict(raw)

    images = tuple(
        url
        for url in (_as_str(_as_dict(node).get("url")) for node in _edge_nodes(product.get("images")))
        if url
    )

    variants = _edge_nodes(product.get("variants"))
    variant = variants[0] if variants else {}

    price = _as_number(_as_dict(variant.get("price")).get("amount"))
    list_price = _as_number(_as_dict(variant.get("compareAtPrice")).get("amount")) or price

    quantity = variant.get("quantityAvailable")
    if quantity is None:
        quantity = 1 if variant.get("availableForSale") is True else 0
    available = _as_number(quantity) > 0

    return Product(
        id=_as_str(product.get("id")),
        name=_as_str(product.get("title")),
        description=_as_str(product.get("description")),
        images=images,
        price=price,
        list_price=list_price,
        available=available,
        slug=_as_str(product.get("handle")),
    )


def _edge_nodes(connection: Any) -> list[dict[str, Any]]:
    edges = _as_list(_as_dict(connection).get("edges"))
    return [_as_dict(_as_dict(edge).get("node")) for edge in edges]


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _as_str(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


def _as_number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0
