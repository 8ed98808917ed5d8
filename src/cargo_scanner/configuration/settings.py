"""
Application settings and configuration.

Provides centralized configuration for the cargo scanner.
"""
import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Union


def _default_db_path() -> Union[Path, str]:
    env_path = os.environ.get("CARGO_SCANNER_DB_PATH")
    if env_path == ":memory:":
        return env_path
    return Path(env_path) if env_path else Path("var/cargo_scanner.db")


@dataclass
class Settings:
    """
    Application settings.

    Attributes:
        db_path: Path to SQLite database file (":memory:" for tests)
        prices_ttl: Freshness window of cached price points
        commodities_ttl: Freshness window of the cached commodities list
        volatility_ceiling: Volatility at which confidence bottoms out
        cross_system_penalty: Per-SCU penalty for selling outside home_system
        armistice_penalty: Per-SCU penalty for armistice-zone terminals
        hotspot_penalty: Per-SCU penalty for known hotspots
        home_system: System the trader operates from
        known_hotspots: Hotspot location ids or name fragments
        top_n: Locations shown per commodity
        feed_base_url: Price feed API root
    """
    db_path: Union[Path, str] = field(default_factory=_default_db_path)
    prices_ttl: timedelta = timedelta(hours=1)
    commodities_ttl: timedelta = timedelta(hours=1)
    volatility_ceiling: float = 1.0
    cross_system_penalty: float = 75.0
    armistice_penalty: float = 25.0
    hotspot_penalty: float = 40.0
    home_system: str = "Stanton"
    known_hotspots: tuple[str, ...] = ("Grim Hex", "Spider", "Jumptown")
    top_n: int = 3
    feed_base_url: str = "https://api.uexcorp.uk/2.0"


# Global settings instance
settings = Settings()
