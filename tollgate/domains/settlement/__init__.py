"""Settlement domain: exactly-once crediting of confirmed payments.

Use Inject(SettlementProcessorProtocol) to settle validated events and
Inject(SettlementWebhookProtocol) to process raw payment webhooks.
"""
