from .cargo_repository_sqlalchemy import CargoRepositorySQLAlchemy
from .engine import create_engine_from_config
from .models import metadata
from .price_cache_repository_sqlalchemy import PriceCacheRepositorySQLAlchemy

__all__ = [
    'CargoRepositorySQLAlchemy',
    'PriceCacheRepositorySQLAlchemy',
    'create_engine_from_config',
    'metadata',
]
