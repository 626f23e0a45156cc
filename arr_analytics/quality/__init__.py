"""
Data Quality Module
"""
from .validators import (
    TransactionValidator,
    ValidationResult,
    ValidationSeverity,
    ValidationStatus,
    create_transactions_validator,
)

__all__ = [
    "TransactionValidator",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationStatus",
    "create_transactions_validator",
]
