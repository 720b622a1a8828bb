"""Validation models for routing and provider tables loaded from TOML."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from llm_router.core.errors import RoutingConfigError
from llm_router.core.providers.base import REPORT_ONLY_PROVIDERS, ProviderId, ResponseFormat
from llm_router.core.routing.rules import RoutingRule, RuleDefaults


class RoutingRuleSchema(BaseModel):
    """One ``[routing.<task>]`` table."""

    model_config = ConfigDict(extra="forbid")

    primary: ProviderId = Field(description="Provider tried first")
    fallbacks: List[ProviderId] = Field(default_factory=list, description="Providers tried next, in order")
    max_tokens: Optional[int] = Field(default=None, gt=0, description="Default max_tokens")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0, description="Default temperature")
    response_format: Optional[Literal["text", "json"]] = Field(default=None, description="Default response format")
    model: Optional[str] = Field(default=None, min_length=1, description="Default model override")

    @field_validator("primary", mode="before")
    @classmethod
    def _normalize_primary(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("fallbacks", mode="before")
    @classmethod
    def _normalize_fallbacks(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        if isinstance(value, list):
            return [v.strip().lower() if isinstance(v, str) else v for v in value]
        return value

    @model_validator(mode="after")
    def validate_completion_providers(self) -> "RoutingRuleSchema":
        """Report-only providers cannot appear in a completion chain."""
        for provider in [self.primary, *self.fallbacks]:
            if provider in REPORT_ONLY_PROVIDERS:
                raise ValueError(f"provider '{provider.value}' cannot serve completions")
        return self

    def to_rule(self, task_type: str) -> RoutingRule:
        return RoutingRule(
            task_type=task_type,
            primary=self.primary,
            fallbacks=tuple(self.fallbacks),
            defaults=RuleDefaults(
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format=ResponseFormat(self.response_format) if self.response_format else None,
                model=self.model,
            ),
        )


class ProviderOverrideSchema(BaseModel):
    """One ``[providers.<id>]`` table."""

    model_config = ConfigDict(extra="forbid")

    default_model: Optional[str] = Field(default=None, min_length=1)
    max_retries: Optional[int] = Field(default=None, ge=0, le=10)
    retry_delay: Optional[float] = Field(default=None, ge=0.0)
    timeout: Optional[float] = Field(default=None, gt=0.0)
    max_concurrent: Optional[int] = Field(default=None, gt=0)
    rate_limit_per_minute: Optional[int] = Field(default=None, gt=0)
    enabled: Optional[bool] = None
    base_url: Optional[str] = Field(default=None, min_length=1)


def _format_validation_error(prefix: str, exc: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}" for err in exc.errors()
    )
    return f"{prefix}: {problems}"


def parse_routing_tables(tables: Mapping[str, Any]) -> Dict[str, RoutingRule]:
    """Validate ``[routing.*]`` tables into rules keyed by task identifier.

    Raises:
        RoutingConfigError: Any table fails validation.
    """
    rules: Dict[str, RoutingRule] = {}
    for task, table in tables.items():
        if not isinstance(table, Mapping):
            raise RoutingConfigError(f"[routing.{task}] must be a table", task_type=task)
        try:
            rules[task] = RoutingRuleSchema.model_validate(dict(table)).to_rule(task)
        except ValidationError as e:
            raise RoutingConfigError(_format_validation_error(f"Invalid [routing.{task}]", e), task_type=task) from None
    return rules


def parse_provider_tables(tables: Mapping[str, Any]) -> Dict[ProviderId, Dict[str, Any]]:
    """Validate ``[providers.*]`` tables into override dicts keyed by provider.

    Raises:
        RoutingConfigError: Unknown provider name or invalid values.
    """
    overrides: Dict[ProviderId, Dict[str, Any]] = {}
    for name, table in tables.items():
        try:
            provider = ProviderId.parse(name)
        except ValueError:
            raise RoutingConfigError(f"Unknown provider in [providers.{name}]") from None
        if not isinstance(table, Mapping):
            raise RoutingConfigError(f"[providers.{name}] must be a table")
        try:
            parsed = ProviderOverrideSchema.model_validate(dict(table))
        except ValidationError as e:
            raise RoutingConfigError(_format_validation_error(f"Invalid [providers.{name}]", e)) from None
        overrides[provider] = parsed.model_dump(exclude_none=True)
    return overrides
