"""Routing rules and the routing table.

A routing rule names, for one task identifier, the primary provider, an
ordered list of fallbacks and optional request defaults. The table holds
exactly one rule per task identifier.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from llm_router.core.errors import RoutingConfigError
from llm_router.core.providers.base import REPORT_ONLY_PROVIDERS, LLMRequest, ProviderId, ResponseFormat

logger = logging.getLogger(__name__)


class TaskType(str, Enum):
    """Built-in task identifiers. Every one must have a routing rule."""

    DOCUMENT_ANALYSIS = "document_analysis"
    FIELD_EXTRACTION = "field_extraction"
    VISION_EXTRACTION = "vision_extraction"
    DEAL_ANALYSIS = "deal_analysis"
    CLARIFICATION_REASONING = "clarification_reasoning"
    MARKET_INTELLIGENCE = "market_intelligence"
    SYNTHESIS = "synthesis"
    DEEP_RESEARCH = "deep_research"
    EMBEDDINGS = "embeddings"
    STRUCTURE_ANALYSIS = "structure_analysis"
    DATA_EXTRACTION = "data_extraction"


def task_key(task: Union[str, TaskType]) -> str:
    return task.value if isinstance(task, TaskType) else str(task).strip()


@dataclass(frozen=True)
class RuleDefaults:
    """Request defaults a rule fills in when the request leaves them unset."""

    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    response_format: Optional[ResponseFormat] = None
    model: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.max_tokens is not None:
            result["max_tokens"] = self.max_tokens
        if self.temperature is not None:
            result["temperature"] = self.temperature
        if self.response_format is not None:
            result["response_format"] = self.response_format.value
        if self.model:
            result["model"] = self.model
        return result


@dataclass(frozen=True)
class RoutingRule:
    task_type: str
    primary: ProviderId
    fallbacks: Sequence[ProviderId] = ()
    defaults: RuleDefaults = field(default_factory=RuleDefaults)

    def chain(self) -> List[ProviderId]:
        """Primary then fallbacks, in order, first occurrence wins."""
        seen: List[ProviderId] = []
        for provider in (self.primary, *self.fallbacks):
            if provider not in seen:
                seen.append(provider)
        return seen

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "task_type": self.task_type,
            "primary": self.primary.value,
            "fallbacks": [p.value for p in self.fallbacks],
        }
        defaults = self.defaults.to_dict()
        if defaults:
            result["defaults"] = defaults
        return result


def merge_rule_defaults(request: LLMRequest, rule: RoutingRule) -> LLMRequest:
    """Fill unset request fields from the rule's defaults. Request values win."""
    d = rule.defaults
    return request.with_defaults(
        max_tokens=d.max_tokens,
        temperature=d.temperature,
        response_format=d.response_format,
        model=d.model,
    )


def _rule(
    task: TaskType,
    primary: ProviderId,
    fallbacks: Sequence[ProviderId] = (),
    **defaults: Any,
) -> RoutingRule:
    return RoutingRule(task_type=task.value, primary=primary, fallbacks=tuple(fallbacks), defaults=RuleDefaults(**defaults))


_A, _G, _O, _X, _P = (
    ProviderId.ANTHROPIC,
    ProviderId.GEMINI,
    ProviderId.OPENAI,
    ProviderId.GROK,
    ProviderId.PERPLEXITY,
)

DEFAULT_ROUTING_RULES: List[RoutingRule] = [
    _rule(TaskType.DOCUMENT_ANALYSIS, _A, [_G, _O], max_tokens=8192, temperature=0.2),
    _rule(TaskType.FIELD_EXTRACTION, _O, [_A, _G], max_tokens=4096, temperature=0.0, response_format=ResponseFormat.JSON),
    _rule(TaskType.VISION_EXTRACTION, _G, [_A, _O], max_tokens=8192, temperature=0.1),
    _rule(TaskType.DEAL_ANALYSIS, _A, [_O, _G], max_tokens=8192, temperature=0.3),
    _rule(TaskType.CLARIFICATION_REASONING, _A, [_O], max_tokens=4096, temperature=0.2),
    _rule(TaskType.MARKET_INTELLIGENCE, _X, [_P, _A], max_tokens=4096, temperature=0.4),
    _rule(TaskType.SYNTHESIS, _A, [_O, _G], max_tokens=8192, temperature=0.5),
    _rule(TaskType.DEEP_RESEARCH, _P, [_X, _A], max_tokens=4096, temperature=0.2),
    _rule(TaskType.EMBEDDINGS, _O),
    _rule(TaskType.STRUCTURE_ANALYSIS, _A, [_G, _O], max_tokens=4096, temperature=0.0, response_format=ResponseFormat.JSON),
    _rule(TaskType.DATA_EXTRACTION, _O, [_A, _G], max_tokens=8192, temperature=0.0, response_format=ResponseFormat.JSON),
]


def _parse_providers(task: str, values: Iterable[Union[str, ProviderId]]) -> List[ProviderId]:
    parsed: List[ProviderId] = []
    for value in values:
        try:
            provider = ProviderId.parse(value)
        except ValueError:
            raise RoutingConfigError(f"Unknown provider '{value}' in routing rule for {task}", task_type=task) from None
        if provider in REPORT_ONLY_PROVIDERS:
            raise RoutingConfigError(
                f"Provider '{provider.value}' cannot serve completions (routing rule for {task})",
                task_type=task,
            )
        parsed.append(provider)
    return parsed


class RoutingTable:
    """One rule per task identifier.

    Construction validates that every built-in ``TaskType`` is covered and
    that no rule names a report-only provider.

    Raises:
        RoutingConfigError: Duplicate rule, missing built-in task, or a rule
            that routes to a report-only provider.
    """

    def __init__(self, rules: Optional[Iterable[RoutingRule]] = None):
        self._rules: Dict[str, RoutingRule] = {}
        for rule in DEFAULT_ROUTING_RULES if rules is None else rules:
            key = task_key(rule.task_type)
            if key in self._rules:
                raise RoutingConfigError(f"Duplicate routing rule for {key}", task_type=key)
            _parse_providers(key, rule.chain())
            self._rules[key] = rule if rule.task_type == key else replace(rule, task_type=key)

        missing = [t.value for t in TaskType if t.value not in self._rules]
        if missing:
            raise RoutingConfigError(f"No routing rule for task types: {', '.join(missing)}")

    def resolve(self, task: Union[str, TaskType]) -> RoutingRule:
        key = task_key(task)
        rule = self._rules.get(key)
        if rule is None:
            raise RoutingConfigError(f"No routing rule for task type: {key}", task_type=key)
        return rule

    def override(
        self,
        task: Union[str, TaskType],
        primary: Union[str, ProviderId],
        fallbacks: Sequence[Union[str, ProviderId]] = (),
    ) -> RoutingRule:
        """Replace a rule's chain, keeping its request defaults."""
        current = self.resolve(task)
        parsed = _parse_providers(current.task_type, [primary, *fallbacks])
        updated = replace(current, primary=parsed[0], fallbacks=tuple(parsed[1:]))
        self._rules[current.task_type] = updated
        logger.info(
            "Routing override for %s: %s -> %s",
            current.task_type,
            [p.value for p in current.chain()],
            [p.value for p in updated.chain()],
        )
        return updated

    def rules(self) -> List[RoutingRule]:
        return list(self._rules.values())

    def __contains__(self, task: object) -> bool:
        return isinstance(task, (str, TaskType)) and task_key(task) in self._rules

    def __len__(self) -> int:
        return len(self._rules)


def apply_rule_overrides(
    base: Iterable[RoutingRule],
    overrides: Mapping[str, RoutingRule],
) -> List[RoutingRule]:
    """Replace base rules by task key and append rules for new task keys."""
    merged: Dict[str, RoutingRule] = {task_key(rule.task_type): rule for rule in base}
    merged.update({task_key(k): v for k, v in overrides.items()})
    return list(merged.values())
