"""
User configuration management for the cargo scanner CLI.

Handles reading and writing user preferences to ~/.cargo-scanner/config.json
"""
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

from ..domain.shared.exceptions import InvalidParamsError
from ..domain.valuation.profitability import ProfitThresholds

logger = logging.getLogger(__name__)


class Config:
    """
    User configuration manager.

    Stores preferences like the profitability band thresholds.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to config file. Defaults to ~/.cargo-scanner/config.json
        """
        if config_path:
            self.config_path = config_path
        else:
            self.config_path = Path.home() / ".cargo-scanner" / "config.json"

        self._config: Dict[str, Any] = {}
        self._load()

    def _load(self):
        """Load configuration from file"""
        if not self.config_path.exists():
            logger.debug(f"Config file not found at {self.config_path}, using defaults")
            self._config = {}
            return

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Error loading config: {e}, using defaults")
            self._config = {}
            return

        if not isinstance(data, dict):
            logger.warning(f"Config at {self.config_path} is not a JSON object, using defaults")
            data = {}
        self._config = data
        logger.debug(f"Loaded config from {self.config_path}")

    def _save(self):
        """Save configuration to file"""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.config_path, 'w') as f:
                json.dump(self._config, f, indent=2)

            logger.debug(f"Saved config to {self.config_path}")
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            raise

    @property
    def profit_thresholds(self) -> Optional[ProfitThresholds]:
        """
        Configured profitability band thresholds.

        Returns:
            ProfitThresholds, or None when either value is unset or invalid
        """
        low = self._config.get('threshold_low')
        high = self._config.get('threshold_high')
        if low is None or high is None:
            return None

        try:
            return ProfitThresholds(low=low, high=high)
        except InvalidParamsError as e:
            logger.warning(f"Ignoring invalid thresholds in config: {e}")
            return None

    def set_profit_thresholds(self, thresholds: ProfitThresholds):
        """
        Persist profitability band thresholds.

        Args:
            thresholds: Validated thresholds
        """
        self._config['threshold_low'] = thresholds.low
        self._config['threshold_high'] = thresholds.high
        self._save()
        logger.info(f"Set profit thresholds to {thresholds.low:g}/{thresholds.high:g}")

    def clear_profit_thresholds(self):
        """Remove stored thresholds"""
        self._config.pop('threshold_low', None)
        self._config.pop('threshold_high', None)
        self._save()


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get global config instance.

    Returns:
        Config: Global config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config():
    """Reset global config instance (useful for testing)"""
    global _config
    _config = None
