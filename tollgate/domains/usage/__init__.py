"""Usage domain: the TrackUsage and GetCredits operations.

Use Inject(UsageServiceProtocol) in FastAPI endpoints.
"""
