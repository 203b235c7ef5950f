from .base_client import ChefServerClient
from .catalog import ChefCookbookCatalog
from .search import ChefNodeSearch

__all__ = ["ChefCookbookCatalog", "ChefNodeSearch", "ChefServerClient"]
