"""HTTP API request context.

Only the API layer creates these, via deps.get_context().
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from tollgate.core.logging import ContextualLogger


@dataclass
class ApiContext:
    """Per-request context: the authenticated principal and a scoped logger."""

    principal_id: str
    request_id: str
    logger: ContextualLogger = field(repr=False)

    auth_method: str = "header"
    auth_metadata: Optional[Dict[str, Any]] = None

    @property
    def is_token_auth(self) -> bool:
        """Whether the principal came from a verified bearer token."""
        return self.auth_method == "jwt"
