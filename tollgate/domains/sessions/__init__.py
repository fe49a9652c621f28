"""Usage session domain: the start/increment/end state machine.

Use Inject(SessionTrackerProtocol) in FastAPI endpoints for the singleton tracker.
"""
