"""Event bus adapters."""

from tollgate.adapters.event_bus.fake import FakeEventBus
from tollgate.adapters.event_bus.in_memory import InMemoryEventBus

__all__ = ["InMemoryEventBus", "FakeEventBus"]
