"""Routing configuration errors.

These signal a fault in the routing table or provider configuration. They
are raised at startup or when a request names a task with no rule, and are
never absorbed into the fallback chain.
"""

from typing import Optional


class RoutingConfigError(ValueError):
    """Raised for missing or invalid routing configuration.

    Attributes:
        task_type: Task identifier involved, if any
    """

    def __init__(self, message: str, *, task_type: Optional[str] = None):
        self.task_type = task_type
        super().__init__(message)
