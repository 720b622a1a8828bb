"""Task routing: task identifiers, routing rules and the routing table."""

from llm_router.core.routing.rules import (
    DEFAULT_ROUTING_RULES,
    RoutingRule,
    RoutingTable,
    RuleDefaults,
    TaskType,
    apply_rule_overrides,
    merge_rule_defaults,
    task_key,
)
from llm_router.core.routing.schema import (
    ProviderOverrideSchema,
    RoutingRuleSchema,
    parse_provider_tables,
    parse_routing_tables,
)

__all__ = [
    "DEFAULT_ROUTING_RULES",
    "RoutingRule",
    "RoutingTable",
    "RuleDefaults",
    "TaskType",
    "apply_rule_overrides",
    "merge_rule_defaults",
    "task_key",
    "ProviderOverrideSchema",
    "RoutingRuleSchema",
    "parse_provider_tables",
    "parse_routing_tables",
]
