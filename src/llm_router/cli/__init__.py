"""Command-line interface for the LLM router."""

from llm_router.cli.main import cli, main

__all__ = ["cli", "main"]
