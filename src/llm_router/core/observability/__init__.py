"""Observability utilities: audit events, logged metrics and the tool decorator."""

from llm_router.core.observability.audit import (
    AuditEvent,
    AuditEventType,
    AuditLogger,
    audit_log,
    get_audit_logger,
)
from llm_router.core.observability.decorators import mcp_tool
from llm_router.core.observability.metrics import (
    Metric,
    MetricsCollector,
    MetricType,
    get_metrics,
)

__all__ = [
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
    "audit_log",
    "get_audit_logger",
    "mcp_tool",
    "Metric",
    "MetricsCollector",
    "MetricType",
    "get_metrics",
]
