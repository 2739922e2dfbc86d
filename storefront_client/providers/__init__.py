from .base import GraphQLError, Provider, ProviderError
from .cookie_session import CookieSessionProvider
from .factory import create_provider
from .header_token import HeaderTokenProvider

__all__ = [
    "Provider",
    "ProviderError",
    "GraphQLError",
    "HeaderTokenProvider",
    "CookieSessionProvider",
    "create_provider",
]
