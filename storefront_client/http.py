from __future__ import annotations

import json
import logging
import time
from typing import Any

import requests

from storefront_client.session import AuthSession

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)
UNPARSEABLE_ERROR_MESSAGE = "Unknown error, could not parse JSON."


class TransportError(RuntimeError):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ApiError(TransportError):
    pass


class ParseError(TransportError):
    pass


class BearerTokenAuth:
    """Static storefront access token, plus a bearer token once signed in."""

    def __init__(self, access_token: str, header_name: str = "X-Shopify-Storefront-Access-Token"):
        self._access_token = access_token
        self._header_name = header_name

    def headers(self, token: str | None) -> dict[str, str]:
        headers = {self._header_name: self._access_token}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers


class SessionCookieAuth:
    def __init__(self, header_name: str = "VtexIdclientAutCookie"):
        self._header_name = header_name

    def headers(self, token: str | None) -> dict[str, str]:
        if not token:
            return {}
        return {self._header_name: token}


class Dispatcher:
    def __init__(
        self,
        base_url: str,
        session: AuthSession,
        auth: BearerTokenAuth | SessionCookieAuth,
        *,
        default_headers: dict[str, str] | None = None,
        default_params: dict[str, Any] | None = None,
        timeout_seconds: int = 30,
        retry_attempts: int = 0,
        http_session: requests.Session | None = None,
    ):
        self._base_url = base_url
        self._session = session
        self._auth = auth
        self._default_headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        self._default_headers.update(default_headers or {})
        self._default_params = dict(default_params or {})
        self._timeout_seconds = timeout_seconds
        self._retry_attempts = retry_attempts
        self._http = http_session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def session(self) -> AuthSession:
        return self._session

    @property
    def default_params(self) -> dict[str, Any]:
        return dict(self._default_params)

    def resolve_url(self, path: str | None = None) -> str:
        return f"{self._base_url}{path}" if path else self._base_url

    def dispatch(
        self,
        path: str | None = None,
        method: str = "POST",
        body: Any = None,
        extra_headers: dict[str, str] | None = None,
    ) -> Any:
        # Default query parameters only apply to the base URL; absolute
        # URLs passed to request() carry their own.
        return self.request(
            self.resolve_url(path),
            method,
            json_body=body,
            params=self._default_params or None,
            headers=extra_headers,
        )

    def request(
        self,
        url: str,
        method: str = "GET",
        *,
        json_body: Any = None,
        form: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = True,
        retry: bool = True,
    ) -> Any:
        response = self.send(
            url,
            method,
            json_body=json_body,
            form=form,
            params=params,
            headers=headers,
            authenticated=authenticated,
            retry=retry,
        )
        if not response.ok:
            raise ApiError(
                status_code=response.status_code,
                message=f"API error! Status: {response.status_code}. Message: {error_message(response)}",
            )
        return parse_json(response)

    def send(
        self,
        url: str,
        method: str = "GET",
        *,
        json_body: Any = None,
        form: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = True,
        retry: bool = True,
    ) -> requests.Response:
        request_headers = self._build_headers(headers, authenticated=authenticated)
        if form is not None:
            request_headers["Content-Type"] = "application/x-www-form-urlencoded"

        attempts = self._retry_attempts + 1 if retry else 1
        for attempt in range(1, attempts + 1):
            logger.debug("%s %s (attempt %d/%d)", method, url, attempt, attempts)
            try:
                response = self._http.request(
                    method,
                    url,
                    headers=request_headers,
                    json=json_body,
                    data=form,
                    params=params,
                    timeout=self._timeout_seconds,
                )
            except requests.RequestException as exc:
                raise TransportError(status_code=0, message=f"Request to {url} failed: {exc}") from exc

            if response.status_code in RETRYABLE_STATUS_CODES and attempt < attempts:
                logger.info("%s %s returned %d, retrying", method, url, response.status_code)
                time.sleep(1.5 * attempt)
                continue
            return response

        raise TransportError(status_code=0, message=f"Request to {url} failed")

    def _build_headers(self, headers: dict[str, str] | None, *, authenticated: bool) -> dict[str, str]:
        merged = dict(self._default_headers)
        merged.update(headers or {})

        token = self._session.token() if authenticated else None
        merged.update(self._auth.headers(token))
        return merged


def read_json_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def parse_json(response: requests.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise ParseError(
            status_code=response.status_code,
            message=f"Response from {response.url} is not valid JSON: {response.text[:200]}",
        ) from exc


def error_message(response: requests.Response) -> str:
    body = read_json_body(response)
    if body is None:
        return UNPARSEABLE_ERROR_MESSAGE
    if isinstance(body, dict):
        for key in ("message", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, dict):
                value = value.get("message")
            if isinstance(value, str) and value.strip():
                return value.strip()
    return json.dumps(body)[:500]
