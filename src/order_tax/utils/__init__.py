"""
Utilities Module

This module contains shared utilities and helper functions.
"""

from .config import Config
from .logging import setup_logging

__all__ = ["Config", "setup_logging"]
