"""
Configuration utilities for the Order Tax calculator.
"""

import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


class Config:
    """Configuration manager for the Order Tax project."""

    def __init__(self, env_file: Optional[str] = None) -> None:
        """Initialize configuration.

        If an env_file path is provided, load environment variables from it.
        Otherwise, do not auto-load a .env file to keep defaults predictable.
        """
        self.env_file = env_file
        self._load_environment()
        self._config = self._load_config()

    def _load_environment(self) -> None:
        """Load environment variables from explicit .env file if provided."""
        if not self.env_file:
            return
        env_path = Path(self.env_file)
        if env_path.exists():
            load_dotenv(env_path)

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        return {
            # Core settings
            "log_level": self._get_str("LOG_LEVEL", default="INFO"),
            # Tax calculation settings
            "default_tax_rate": self._get_decimal("DEFAULT_TAX_RATE", default="0"),
            "shipping_tax_rate": self._get_optional_decimal("SHIPPING_TAX_RATE"),
            "discount_overflow": self._get_str("DISCOUNT_OVERFLOW", default="allow").lower(),
            "rounding_stage": self._get_str("ROUNDING_STAGE", default="final").lower(),
            # Webhook settings
            "signing_keys_file": self._get_str("SIGNING_KEYS_FILE", default=""),
        }

    def _get_str(self, key: str, default: str = "") -> str:
        """Get string configuration value."""
        if self.env_file is None:
            return default
        return os.getenv(key, default)

    def _get_decimal(self, key: str, default: str = "0") -> Decimal:
        """Get decimal configuration value, falling back to default on bad input."""
        raw = self._get_str(key, default=default)
        try:
            return Decimal(raw)
        except InvalidOperation:
            return Decimal(default)

    def _get_optional_decimal(self, key: str) -> Optional[Decimal]:
        """Get decimal configuration value, or None when unset or invalid."""
        raw = self._get_str(key, default="")
        if not raw:
            return None
        try:
            return Decimal(raw)
        except InvalidOperation:
            return None

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get configuration value using bracket notation."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if configuration key exists."""
        return key in self._config
