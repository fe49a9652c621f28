"""Budget alert notifier adapters."""
