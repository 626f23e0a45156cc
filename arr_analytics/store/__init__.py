"""
Transaction Store Module
"""
from .models import Customer, Transaction, TransactionType
from .profiles import CustomerProfiles, build_customer_profiles
from .transactions import TransactionStore

__all__ = [
    "Customer",
    "Transaction",
    "TransactionType",
    "CustomerProfiles",
    "build_customer_profiles",
    "TransactionStore",
]
