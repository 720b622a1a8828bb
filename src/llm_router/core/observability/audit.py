"""Audit logging for routing events.

Provides structured audit logging with automatic request ID population from
the routing context. Audit records go to a dedicated logger so they can be
filtered or shipped separately from diagnostic logs.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from llm_router.core.context import get_request_id

logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Types of audit events emitted by the router."""

    CIRCUIT_STATE_CHANGE = "circuit_state_change"
    RETRY_ATTEMPT = "retry_attempt"
    ROUTE_FALLBACK = "route_fallback"
    ROUTE_EXHAUSTED = "route_exhausted"
    ROUTE_OVERRIDE = "route_override"
    TOOL_INVOCATION = "tool_invocation"
    OTHER = "other"


@dataclass
class AuditEvent:
    """Structured audit event."""

    event_type: AuditEventType
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Auto-populate request_id from context if not set."""
        if self.request_id is None:
            self.request_id = get_request_id() or None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "details": self.details,
        }
        if self.request_id:
            result["request_id"] = self.request_id
        return result


class AuditLogger:
    """Writes audit events to the ``<module>.audit`` logger."""

    def __init__(self):
        self._logger = logging.getLogger(f"{__name__}.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._logger.info(f"AUDIT: {event.event_type.value}", extra={"audit": event.to_dict()})

    def circuit_state_change(self, provider: str, old_state: str, new_state: str, **details: Any) -> None:
        """Log a breaker transition."""
        self.log(
            AuditEvent(
                event_type=AuditEventType.CIRCUIT_STATE_CHANGE,
                details={"provider": provider, "old_state": old_state, "new_state": new_state, **details},
            )
        )

    def route_override(self, task_type: str, primary: str, fallbacks: list, **details: Any) -> None:
        """Log a runtime change to a routing rule."""
        self.log(
            AuditEvent(
                event_type=AuditEventType.ROUTE_OVERRIDE,
                details={"task_type": task_type, "primary": primary, "fallbacks": list(fallbacks), **details},
            )
        )

    def tool_invocation(self, tool_name: str, success: bool, duration_ms: float, **details: Any) -> None:
        """Log an MCP tool invocation."""
        self.log(
            AuditEvent(
                event_type=AuditEventType.TOOL_INVOCATION,
                details={"tool": tool_name, "success": success, "duration_ms": duration_ms, **details},
            )
        )


# Global audit logger
_audit = AuditLogger()


def get_audit_logger() -> AuditLogger:
    """Get the global audit logger."""
    return _audit


def audit_log(event_type: str, **details: Any) -> None:
    """
    Convenience function for audit logging.

    Args:
        event_type: Type of event (circuit_state_change, retry_attempt,
                    route_fallback, route_exhausted, route_override, tool_invocation)
        **details: Additional details to include in the audit log
    """
    try:
        event_enum = AuditEventType(event_type)
    except ValueError:
        event_enum = AuditEventType.OTHER
        details["original_event_type"] = event_type

    _audit.log(AuditEvent(event_type=event_enum, details=details))
