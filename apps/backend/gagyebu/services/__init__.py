"""
Services 패키지

비즈니스 로직 서비스 클래스들을 제공합니다.
"""

from .auth_service import AuthService
from .budget_service import BudgetService
from .category_service import CategoryService
from .daily_balance_service import DailyBalanceService
from .savings_service import SavingsService
from .summary_service import SummaryService
from .transaction_service import TransactionService

__all__ = [
    "AuthService",
    "BudgetService",
    "CategoryService",
    "DailyBalanceService",
    "SavingsService",
    "SummaryService",
    "TransactionService",
]
