"""
Security Gate
Approves or rejects a data-access action before it runs.

The check is textual: a query that names a sensitive table must contain
the caller's user id verbatim. It is a proxy for "scoped to the caller's
own rows", not a SQL parser, and can be fooled (e.g. an id inside a
comment). Callers only depend on validate(), so a parser-based policy
can replace it later.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from loguru import logger


DEFAULT_SENSITIVE_RESOURCES: Tuple[str, ...] = (
    "users",
    "bookings",
    "payments",
    "messages",
    "conversations",
    "notifications",
    "refreshtokens",
    "wishlist",
)


@dataclass(frozen=True)
class SecurityDecision:
    allowed: bool
    reason: Optional[str] = None


class SecurityGate:
    """
    Stateless policy check
    
    Usage:
        gate = SecurityGate()
        decision = gate.validate("SELECT * FROM Bookings WHERE GuestId = 'U1'", "U1")
        if not decision.allowed:
            return decision.reason
    """
    
    def __init__(self, sensitive_resources: Iterable[str] = DEFAULT_SENSITIVE_RESOURCES):
        self.sensitive_resources = tuple(name.lower() for name in sensitive_resources)
    
    def sensitive_resources_in(self, query_text: str) -> Tuple[str, ...]:
        lowered = (query_text or "").lower()
        return tuple(name for name in self.sensitive_resources if name in lowered)
    
    def validate(self, query_text: str, actor_id: Optional[str]) -> SecurityDecision:
        """
        Args:
            query_text: The proposed query
            actor_id: Authenticated user id, None/empty for guests
        
        Returns:
            SecurityDecision with a reason the agent can act on when rejected
        """
        touched = self.sensitive_resources_in(query_text)
        if not touched:
            return SecurityDecision(allowed=True)
        
        names = ", ".join(touched)
        actor = (actor_id or "").strip()
        
        if not actor:
            logger.warning(f"[SecurityGate] Anonymous access to private data blocked ({names})")
            return SecurityDecision(
                allowed=False,
                reason=(
                    f"Security Alert: Access denied. The query touches private data ({names}) "
                    f"and the user is not logged in. Ask the user to log in."
                )
            )
        
        if actor not in query_text:
            logger.warning(f"[SecurityGate] Unscoped query on {names} blocked for user {actor}")
            return SecurityDecision(
                allowed=False,
                reason=(
                    f"Security Alert: Queries on private data ({names}) must be filtered by the "
                    f"current user's ID '{actor}'. Rewrite the query with a WHERE clause on that ID "
                    f"and try again."
                )
            )
        
        return SecurityDecision(allowed=True)
