"""Event bus subscribers for the budget domain."""

from tollgate.domains.budget.subscribers.budget_listener import BudgetListener

__all__ = ["BudgetListener"]
