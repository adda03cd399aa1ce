from .user import User
from .category import Category, CATEGORY_TYPES
from .transaction import Transaction, TRANSACTION_TYPES
from .budget import Budget, BUDGET_PERIODS

__all__ = [
    "User",
    "Category",
    "Transaction",
    "Budget",
    "CATEGORY_TYPES",
    "TRANSACTION_TYPES",
    "BUDGET_PERIODS",
]
