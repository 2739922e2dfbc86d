from __future__ import annotations

import logging

import requests

from storefront_client.config import COOKIE_SESSION, HEADER_TOKEN, BackendConfig, UnsupportedBackend
from storefront_client.credentials import CredentialStore
from storefront_client.providers.base import Provider
from storefront_client.providers.cookie_session import CookieSessionProvider
from storefront_client.providers.header_token import HeaderTokenProvider
from storefront_client.session import AuthSession, SessionHandle

logger = logging.getLogger(__name__)


def create_provider(
    config: BackendConfig,
    session_handle: SessionHandle,
    credential_store: CredentialStore,
    *,
    timeout_seconds: int = 30,
    retry_attempts: int = 0,
    http_session: requests.Session | None = None,
) -> Provider:
    """Build the provider for *config*.

    This is the only place that branches on backend kind. Adding a backend
    means one provider class plus one case here.
    """
    kind = getattr(config, "kind", None)

    if kind == HEADER_TOKEN:
        provider: Provider = HeaderTokenProvider(
            config,  # type: ignore[arg-type]
            AuthSession(credential_store, HEADER_TOKEN),
            timeout_seconds=timeout_seconds,
            retry_attempts=retry_attempts,
            http_session=http_session,
        )
    elif kind == COOKIE_SESSION:
        provider = CookieSessionProvider(
            config,  # type: ignore[arg-type]
            session_handle,
            AuthSession(credential_store, COOKIE_SESSION),
            timeout_seconds=timeout_seconds,
            retry_attempts=retry_attempts,
            http_session=http_session,
        )
    else:
        raise UnsupportedBackend(f"Unsupported e-commerce backend: {kind!r}")

    logger.debug("Using %s provider for %s", provider.kind, config.base_url)
    return provider
