"""
Synthetic Data Module
"""
from .generators import BillingExportGenerator

__all__ = [
    "BillingExportGenerator",
]
