"""
Investments component - Investment counts, filters and process membership.
"""

from .component import (
    calculate_investment_counts,
    filter_investments_by_status,
    get_conversation_investments,
    get_investments_not_in_process,
    get_process_counts,
    get_process_investments,
    get_unassigned_investments,
)
from .models import InvestmentCounts

__all__ = [
    # Entry points
    "calculate_investment_counts",
    "filter_investments_by_status",
    "get_process_investments",
    "get_conversation_investments",
    "get_unassigned_investments",
    "get_investments_not_in_process",
    "get_process_counts",
    # Models
    "InvestmentCounts",
]
