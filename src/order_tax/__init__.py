"""
Order Tax - Discount proration and net/gross tax calculation

Computes the shipping and per-line net/gross breakdown of an order for a
tax webhook, after spreading order-level discounts across every unit.
"""

__version__ = "0.1.0"
__author__ = "Dinuka Abeysinghe"
__email__ = "integration-qa@grubtech.com"

from . import tax_calculation
from . import utils

__all__ = ["tax_calculation", "utils"]
