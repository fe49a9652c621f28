"""Budget domain: spend evaluation against per-principal limits.

Use Inject(BudgetMonitorProtocol) for configuration and evaluation and
Inject(BudgetAlertDispatcherProtocol) to evaluate and notify.
Debits are evaluated automatically by BudgetListener via the EventBus.
"""
