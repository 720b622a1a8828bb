"""Read-only router diagnostics: providers, metrics, health and rules."""

import asyncio

import click

from llm_router.cli.output import emit_success
from llm_router.cli.registry import get_context
from llm_router.cli.resilience import handle_router_errors


@click.command("providers")
@click.pass_context
@handle_router_errors
def providers_cmd(ctx: click.Context) -> None:
    """List registered providers with their configuration and breaker state.

    Examples:
        llm-router providers
    """
    router = get_context(ctx).router
    available = {p.value for p in router.get_available_providers()}
    breakers = router.get_breaker_states()

    providers = []
    for config in router.get_provider_configs():
        entry = config.to_dict()
        entry["registered"] = config.provider.value in available
        entry["breaker"] = breakers.get(config.provider.value)
        providers.append(entry)

    emit_success({"available": sorted(available), "providers": providers})


@click.command("metrics")
@click.pass_context
@handle_router_errors
def metrics_cmd(ctx: click.Context) -> None:
    """Show per-provider usage, latency and cost for this process."""
    router = get_context(ctx).router
    metrics = [m.to_dict() for m in router.get_metrics()]
    total_cost = sum(m["estimated_cost_usd"] for m in metrics)
    emit_success({"metrics": metrics, "total_estimated_cost_usd": round(total_cost, 6)})


@click.command("health")
@click.pass_context
@handle_router_errors
def health_cmd(ctx: click.Context) -> None:
    """Probe every registered provider.

    Exits non-zero only on router errors; unhealthy providers are reported
    in the payload.
    """
    router = get_context(ctx).router
    results = asyncio.run(router.health_check())
    health = {provider.value: ok for provider, ok in results.items()}
    emit_success(
        {
            "providers": health,
            "healthy": sorted(p for p, ok in health.items() if ok),
            "unhealthy": sorted(p for p, ok in health.items() if not ok),
        }
    )


@click.command("rules")
@click.pass_context
@handle_router_errors
def rules_cmd(ctx: click.Context) -> None:
    """Show the effective routing table."""
    router = get_context(ctx).router
    emit_success({"rules": [rule.to_dict() for rule in router.get_routing_rules()]})
