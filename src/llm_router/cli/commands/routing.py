"""Send a single request through the router."""

import asyncio
from typing import Optional

import click

from llm_router.cli.output import emit_success
from llm_router.cli.registry import get_context
from llm_router.cli.resilience import handle_router_errors
from llm_router.core.providers import LLMRequest, ResponseFormat


@click.command("route")
@click.option("--task", "task_type", required=True, help="Task identifier (e.g. deal_analysis)")
@click.option("--prompt", required=True, help="User prompt")
@click.option("--system", "system_prompt", default="", help="System prompt")
@click.option("--max-tokens", type=click.IntRange(min=1), help="Override the rule's max_tokens")
@click.option("--temperature", type=click.FloatRange(0.0, 2.0), help="Override the rule's temperature")
@click.option("--json", "as_json", is_flag=True, help="Request a JSON-formatted response")
@click.option("--model", help="Override the provider's default model")
@click.pass_context
@handle_router_errors
def route_cmd(
    ctx: click.Context,
    task_type: str,
    prompt: str,
    system_prompt: str,
    max_tokens: Optional[int],
    temperature: Optional[float],
    as_json: bool,
    model: Optional[str],
) -> None:
    """Route a prompt to the best provider for TASK.

    Examples:
        llm-router route --task deal_analysis --prompt "Summarize the deal"
        llm-router route --task field_extraction --prompt "..." --json
    """
    router = get_context(ctx).router
    request = LLMRequest(
        task_type=task_type,
        system_prompt=system_prompt,
        user_prompt=prompt,
        max_tokens=max_tokens,
        temperature=temperature,
        response_format=ResponseFormat.JSON if as_json else None,
        metadata={"model": model} if model else {},
    )

    response = asyncio.run(router.route(request))
    emit_success(response.to_dict())
