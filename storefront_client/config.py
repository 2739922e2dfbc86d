from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from pathlib import Path
import sys
from typing import Any, Union

HEADER_TOKEN = "header_token"
COOKIE_SESSION = "cookie_session"

_PROVIDER_ALIASES = {
    "header_token": HEADER_TOKEN,
    "shopify": HEADER_TOKEN,
    "cookie_session": COOKIE_SESSION,
    "vtex": COOKIE_SESSION,
}


class ConfigurationError(ValueError):
    pass


class UnsupportedBackend(ConfigurationError):
    pass


@dataclass(frozen=True)
class HeaderTokenConfig:
    base_url: str
    access_token: str
    kind: str = field(default=HEADER_TOKEN, init=False)


@dataclass(frozen=True)
class CookieSessionConfig:
    base_url: str
    workspace: str = "master"
    kind: str = field(default=COOKIE_SESSION, init=False)


BackendConfig = Union[HeaderTokenConfig, CookieSessionConfig]


def resolve_backend_kind(name: str) -> str:
    kind = _PROVIDER_ALIASES.get(name.strip().lower())
    if kind is None:
        raise UnsupportedBackend(f"Unsupported e-commerce backend: {name!r}")
    return kind


def backend_config_from_mapping(data: dict[str, Any]) -> BackendConfig:
    """Build a backend config from a ``providers.json`` style mapping.

    Expected shape::

        {"provider": "Vtex",
         "credentials": {"Vtex": {"storeUrl": "...", "workspace": "master"}}}
    """
    provider_name = str(data.get("provider", "")).strip()
    if not provider_name:
        raise ConfigurationError("Provider config is missing 'provider'")

    kind = resolve_backend_kind(provider_name)
    credentials = data.get("credentials") or {}
    section = credentials.get(provider_name) if isinstance(credentials, dict) else None
    if not isinstance(section, dict):
        raise ConfigurationError(f"Provider config is missing credentials for {provider_name!r}")

    store_url = str(section.get("storeUrl", "")).strip()
    if kind == HEADER_TOKEN:
        config: BackendConfig = HeaderTokenConfig(
            base_url=store_url,
            access_token=str(section.get("accessToken", "")).strip(),
        )
    else:
        config = CookieSessionConfig(
            base_url=store_url,
            workspace=str(section.get("workspace", "")).strip() or "master",
        )
    validate_backend_config(config)
    return config


def validate_backend_config(config: BackendConfig) -> None:
    missing = []
    if not config.base_url:
        missing.append("STOREFRONT_BASE_URL")
    if isinstance(config, HeaderTokenConfig) and not config.access_token:
        missing.append("STOREFRONT_ACCESS_TOKEN")

    if missing:
        raise ConfigurationError(
            "Missing required settings: " + ", ".join(missing)
        )

    if not config.base_url.startswith(("http://", "https://")):
        raise ConfigurationError("STOREFRONT_BASE_URL must be an http(s) URL")


@dataclass(frozen=True)
class AppSettings:
    backend: BackendConfig
    timeout_seconds: int
    retry_attempts: int
    credentials_path: str
    log_level: str

    @staticmethod
    def from_env() -> "AppSettings":
        _load_dotenv_if_present()

        config_file = os.getenv("STOREFRONT_CONFIG_FILE", "").strip()
        if config_file:
            backend = load_backend_config(config_file)
        else:
            backend = _backend_from_env()

        timeout_seconds = int(os.getenv("STOREFRONT_TIMEOUT_SECONDS", "30"))
        retry_attempts = int(os.getenv("STOREFRONT_RETRY_ATTEMPTS", "2"))

        default_credentials_path = os.path.join(
            os.getenv("LOCALAPPDATA", os.path.expanduser("~")),
            ".storefront_client",
            "credentials.bin",
        )
        credentials_path = os.getenv("STOREFRONT_CREDENTIALS_PATH", default_credentials_path)
        log_level = os.getenv("STOREFRONT_LOG_LEVEL", "INFO").strip().upper()

        settings = AppSettings(
            backend=backend,
            timeout_seconds=timeout_seconds,
            retry_attempts=retry_attempts,
            credentials_path=credentials_path,
            log_level=log_level,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        validate_backend_config(self.backend)

        if self.timeout_seconds <= 0:
            raise ConfigurationError("STOREFRONT_TIMEOUT_SECONDS must be greater than 0")

        if self.retry_attempts < 0:
            raise ConfigurationError("STOREFRONT_RETRY_ATTEMPTS must be 0 or greater")

        if not self.credentials_path:
            raise ConfigurationError("STOREFRONT_CREDENTIALS_PATH must not be empty")


def load_backend_config(path: str) -> BackendConfig:
    config_path = Path(path).expanduser()
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read provider config {config_path}: {exc}") from exc
    except ValueError as exc:
        raise ConfigurationError(f"Provider config {config_path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Provider config {config_path} must be a JSON object")
    return backend_config_from_mapping(data)


def _backend_from_env() -> BackendConfig:
    provider_name = os.getenv("STOREFRONT_PROVIDER", "").strip()
    if not provider_name:
        raise ConfigurationError("Missing required settings: STOREFRONT_PROVIDER")

    kind = resolve_backend_kind(provider_name)
    base_url = os.getenv("STOREFRONT_BASE_URL", "").strip()
    if kind == HEADER_TOKEN:
        return HeaderTokenConfig(
            base_url=base_url,
            access_token=os.getenv("STOREFRONT_ACCESS_TOKEN", "").strip(),
        )
    return CookieSessionConfig(
        base_url=base_url,
        workspace=os.getenv("STOREFRONT_WORKSPACE", "").strip() or "master",
    )


def _load_dotenv_if_present(file_name: str = ".env") -> None:
    for candidate in _candidate_env_files(file_name):
        _load_env_file(candidate)


def _candidate_env_files(file_name: str) -> list[Path]:
    candidates: list[Path] = []

    explicit = os.getenv("STOREFRONT_ENV_FILE", "").strip()
    if explicit:
        candidates.append(Path(explicit).expanduser())

    candidates.append(Path.cwd() / file_name)

    if getattr(sys, "frozen", False):
        candidates.append(Path(sys.executable).resolve().parent / file_name)
    else:
        candidates.append(Path(__file__).resolve().parent.parent / file_name)

    unique_candidates: list[Path] = []
    seen: set[str] = set()
    for path in candidates:
        normalized = str(path.resolve()) if path.exists() else str(path)
        if normalized in seen:
            continue
        seen.add(normalized)
        unique_candidates.append(path)
    return unique_candidates


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return

    try:
        with path.open("r", encoding="utf-8") as env_file:
            for raw_line in env_file:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")

                if key and key not in os.environ:
                    os.environ[key] = value
    except OSError:
        return
