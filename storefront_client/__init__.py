from .models import Facet, Product, ProductFilters
from .providers import Provider, create_provider
from .repository import EcommerceRepository, RepositoryError
from .result import Err, Ok
from .services import StorefrontService

__all__ = [
    "Product",
    "ProductFilters",
    "Facet",
    "Provider",
    "create_provider",
    "EcommerceRepository",
    "RepositoryError",
    "Ok",
    "Err",
    "StorefrontService",
]
