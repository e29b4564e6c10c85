"""
VaultWard CLI

Commands:
    vaultward serve              Start the API server
    vaultward status             Show version, settings and dependencies
    vaultward classify TOOL      Show how a tool name is classified
    vaultward registry           List the configured risk registry

Settings come from VAULTWARD_* environment variables (see vaultward.config).
"""

from __future__ import annotations

import importlib
import json
import os
import sys

import click
from pydantic import ValidationError

from vaultward import __version__
from vaultward.config import VaultWardSettings
from vaultward.exceptions import RegistryError
from vaultward.tools.registry import RiskRegistry


def _load_settings() -> VaultWardSettings:
    try:
        return VaultWardSettings.from_env()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration:\n{e}") from e


def _load_registry(settings: VaultWardSettings) -> RiskRegistry:
    try:
        return settings.build_registry()
    except RegistryError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(version=__version__, prog_name="vaultward")
def cli() -> None:
    """VaultWard: safety gate for agents that edit a note vault"""


@cli.command()
@click.option("--host", default="0.0.0.0", help="Bind address")
@click.option("--port", default=8000, type=int, help="Port number")
@click.option("--reload", is_flag=True, help="Auto-reload on changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the VaultWard API server."""
    import uvicorn

    settings = _load_settings()
    _load_registry(settings)

    _print_header("VaultWard API Server")
    click.echo(f"  Binding: {host}:{port}")
    click.echo(f"  Reload: {'enabled' if reload else 'disabled'}")
    click.echo(f"  Reflection: {settings.reflection_provider} (timeout {settings.reflection_timeout:g}s)")
    click.echo()

    uvicorn.run(
        "vaultward.api.server:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def status() -> None:
    """Show VaultWard version, configuration and dependencies."""
    settings = _load_settings()

    _print_header("VaultWard Status")
    click.echo(f"  Version: {__version__}")
    click.echo(f"  Python: {sys.version.split()[0]}")

    click.echo("\n  Reflection:")
    click.echo(f"    {'provider':24s} {settings.reflection_provider}")
    click.echo(f"    {'model':24s} {settings.reflection_model or 'provider default'}")
    click.echo(f"    {'timeout':24s} {settings.reflection_timeout:g}s")
    click.echo(f"    {'confirm timeout':24s} {settings.confirm_timeout:g}s")

    deps = {
        "anthropic": "Anthropic SDK",
        "openai": "OpenAI/OpenRouter Provider",
        "fastapi": "API Server",
        "uvicorn": "ASGI Server",
        "opentelemetry.sdk": "OTLP Export",
    }

    click.echo("\n  Dependencies:")
    for pkg, label in deps.items():
        try:
            mod = importlib.import_module(pkg)
            version = getattr(mod, "__version__", "installed")
            click.echo(f"    {label:28s} {pkg:20s} {version}")
        except ImportError:
            click.echo(f"    {label:28s} {pkg:20s} NOT INSTALLED")

    click.echo("\n  Environment:")
    env_vars = [
        "VAULTWARD_REFLECTION_API_KEY",
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
    ]
    for var in env_vars:
        value = os.environ.get(var)
        if value:
            masked = value[:4] + "..." + value[-4:] if len(value) > 10 else "***"
            click.echo(f"    {var:30s} {masked}")
        else:
            click.echo(f"    {var:30s} NOT SET")


@cli.command()
@click.argument("tool_name")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def classify(tool_name: str, json_output: bool) -> None:
    """Show the risk category of TOOL_NAME."""
    registry = _load_registry(_load_settings())
    category = registry.classify(tool_name)
    registered = tool_name in registry

    if json_output:
        click.echo(json.dumps({"tool": tool_name, "category": category.value, "registered": registered}))
        return

    suffix = "" if registered else " (not registered, defaults to benign)"
    click.echo(f"{tool_name}: {category.value}{suffix}")


@cli.command()
@click.option("--json-output", is_flag=True, help="Output as JSON")
def registry(json_output: bool) -> None:
    """List the configured risk registry."""
    risk_registry = _load_registry(_load_settings())

    if json_output:
        click.echo(json.dumps(risk_registry.to_dict(), indent=2, sort_keys=True))
        return

    _print_header("VaultWard Risk Registry")
    click.echo("  Destructive (reflection + confirmation):")
    for name in risk_registry.destructive_tools:
        click.echo(f"    {name}")
    click.echo("\n  Benign (executed directly):")
    for name in risk_registry.benign_tools or ["(none registered)"]:
        click.echo(f"    {name}")
    click.echo("\n  Unregistered tools are treated as benign.")


def _print_header(title: str) -> None:
    """Print a formatted header."""
    click.echo(f"\n  {'=' * 60}")
    click.echo(f"  {title}")
    click.echo(f"  {'=' * 60}\n")


if __name__ == "__main__":
    cli()
