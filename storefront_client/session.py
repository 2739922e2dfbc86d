from __future__ import annotations

from typing import Protocol

from storefront_client.credentials import CredentialStore


class SessionHandle(Protocol):
    """Presentation-layer capability for reacting to authentication expiry."""

    def invalidate(self) -> None:
        ...

    def revalidate(self) -> bool:
        ...


class AuthSession:
    """The live session for one backend kind.

    Holds the auth token and, for backends with carts bound to the account,
    the cart session id. Both live in the credential store under keys
    namespaced by backend kind.
    """

    def __init__(self, store: CredentialStore, kind: str):
        self._store = store
        self._kind = kind

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def token_key(self) -> str:
        return f"{self._kind}:auth_token"

    @property
    def order_form_key(self) -> str:
        return f"{self._kind}:order_form_id"

    def token(self) -> str | None:
        return self._store.get(self.token_key) or None

    def save_token(self, token: str) -> None:
        if not token:
            raise ValueError("Refusing to store an empty auth token")
        self._store.set(self.token_key, token)

    def order_form_id(self) -> str | None:
        return self._store.get(self.order_form_key) or None

    def save_order_form_id(self, order_form_id: str) -> None:
        self._store.set(self.order_form_key, order_form_id)

    def clear_order_form(self) -> None:
        self._store.clear(self.order_form_key)

    def clear(self) -> None:
        self._store.clear(self.token_key)
        self._store.clear(self.order_form_key)

    @property
    def is_authenticated(self) -> bool:
        return self.token() is not None
