"""Cookie-session login protocol.

Login runs as a short sequence of steps::

    auth_start -> validate -> persist -> cart_bootstrap

Each step produces a ``StepResult``. The readers in this module turn a raw
HTTP status and JSON body into a step result without touching the network,
so every failure kind can be built directly from a status code and a body.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

AUTH_START = "auth_start"
VALIDATE = "validate"
PERSIST = "persist"
CART_BOOTSTRAP = "cart_bootstrap"

# Matched exactly. A change in the backend's wording breaks detection.
WRONG_CREDENTIALS_STATUS = "WrongCredentials"


class AuthProtocolError(RuntimeError):
    step = ""


class AuthStartFailed(AuthProtocolError):
    step = AUTH_START

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Authentication start failed (HTTP {status_code}): {message}")
        self.status_code = status_code
        self.message = message


class MissingAuthToken(AuthProtocolError):
    step = AUTH_START

    def __init__(self):
        super().__init__("Authentication start did not return an authenticationToken")


class ValidationFailed(AuthProtocolError):
    step = VALIDATE

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Credential validation failed (HTTP {status_code}): {message}")
        self.status_code = status_code
        self.message = message


class WrongCredentials(AuthProtocolError):
    step = VALIDATE

    def __init__(self):
        super().__init__("Wrong email or password")


class MissingFinalToken(AuthProtocolError):
    step = VALIDATE

    def __init__(self, auth_status: str = ""):
        detail = f" (authStatus={auth_status!r})" if auth_status else ""
        super().__init__(f"Credential validation did not return a session token{detail}")
        self.auth_status = auth_status


@dataclass(frozen=True)
class StepResult:
    step: str
    value: str | None = None
    error: Exception | None = None
    required: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class LoginOutcome:
    steps: tuple[StepResult, ...]
    token: str | None = None
    order_form_id: str | None = None

    @property
    def failed_step(self) -> StepResult | None:
        for step in self.steps:
            if step.required and not step.ok:
                return step
        return None

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None and bool(self.token)

    def raise_for_failure(self) -> str:
        failed = self.failed_step
        if failed is not None:
            raise failed.error  # type: ignore[misc]
        if not self.token:
            raise MissingFinalToken()
        return self.token


def read_auth_start(status_code: int, body: Any, message: str = "") -> StepResult:
    if not 200 <= status_code < 300:
        return StepResult(AUTH_START, error=AuthStartFailed(status_code, message or _body_message(body)))

    token = _string_field(body, "authenticationToken")
    if not token:
        return StepResult(AUTH_START, error=MissingAuthToken())
    return StepResult(AUTH_START, value=token)


def read_validation(status_code: int, body: Any, message: str = "") -> StepResult:
    if not 200 <= status_code < 300:
        return StepResult(VALIDATE, error=ValidationFailed(status_code, message or _body_message(body)))

    auth_status = _string_field(body, "authStatus")
    if auth_status == WRONG_CREDENTIALS_STATUS:
        return StepResult(VALIDATE, error=WrongCredentials())

    auth_cookie = body.get("authCookie") if isinstance(body, dict) else None
    token = _string_field(auth_cookie, "Value")
    if not token:
        return StepResult(VALIDATE, error=MissingFinalToken(auth_status))
    return StepResult(VALIDATE, value=token)


def _string_field(body: Any, key: str) -> str:
    if not isinstance(body, dict):
        return ""
    value = body.get(key)
    if not isinstance(value, str):
        return ""
    return value.strip()


def _body_message(body: Any) -> str:
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return "Unknown error"
