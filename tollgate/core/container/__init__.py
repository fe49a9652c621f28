"""Dependency injection container.

Usage:
------
    # Initialize at startup (once, from main.py lifespan)
    from tollgate.core.container import initialize_container
    from tollgate.core.config import settings
    initialize_container(settings)

    # In FastAPI deps.py
    from tollgate.core import container as container_mod
    def get_container() -> Container:
        return container_mod.container

    # In tests (construct directly with fakes, don't use the global)
    from tollgate.core.container import Container
    test_container = Container(ledger_store=InMemoryLedgerStore(), ...)

Module structure:
-----------------
    container/
    ├── __init__.py      # This file - exports public API
    ├── container.py     # Container dataclass (serves)
    └── factory.py       # create_container() (builds)
"""

from typing import TYPE_CHECKING

from tollgate.core.container.container import Container
from tollgate.core.container.factory import create_container

if TYPE_CHECKING:
    from tollgate.core.config import Settings

__all__ = [
    "Container",
    "container",
    "create_container",
    "initialize_container",
    "reset_container",
]


container: Container | None = None
"""Global container instance, set by ``initialize_container()``.

Only api/deps.py reads it. Domain code receives its dependencies through
constructor parameters.
"""


def initialize_container(settings: "Settings") -> None:
    """Initialize the global container. Call once at startup.

    Raises:
        RuntimeError: If the container is already initialized
    """
    global container

    if container is not None:
        raise RuntimeError(
            "Container already initialized. "
            "initialize_container() should only be called once at startup."
        )

    container = create_container(settings)


def reset_container() -> None:
    """Reset the global container to None. For testing only."""
    global container
    container = None
