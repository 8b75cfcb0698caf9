"""Click CLI for running and exercising the webhook relay."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click

from src.config import ConfigError, RelayConfig, load_config
from src.webhook.client import JenkinsClient
from src.webhook.signature import sign_payload


def _load(config_path: str | None) -> RelayConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level.",
)
def cli(log_level: str) -> None:
    """GitHub to Jenkins webhook relay."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--config", "config_path", default=None, help="Path to the JSON settings file.")
@click.option("--host", default="0.0.0.0", help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port to bind (defaults to incomingPort).")
def serve(config_path: str | None, host: str, port: int | None) -> None:
    """Run the relay HTTP server."""
    import uvicorn

    from src.audit.logger import AuditLogger
    from src.proxy.app import create_app

    config = _load(config_path)
    audit_logger = (
        AuditLogger.from_env(config.audit_log_path) if config.audit_log_path else None
    )
    app = create_app(config, audit_logger)
    click.echo(
        f"Relaying {config.webhook_path} to {config.public_view()['targetJenkinsUrl']}",
        err=True,
    )
    uvicorn.run(app, host=host, port=port or config.incoming_port, log_config=None)


@cli.command()
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--secret", required=True, envvar="GITHUB_WEBHOOK_SECRET", help="Shared secret.")
def sign(payload_file: str, secret: str) -> None:
    """Print the X-Hub-Signature-256 value for a payload file."""
    click.echo(sign_payload(Path(payload_file).read_bytes(), secret))


@cli.command()
@click.option("--config", "config_path", default=None, help="Path to the JSON settings file.")
def check(config_path: str | None) -> None:
    """Probe Jenkins once; exit 1 when it is unreachable."""
    config = _load(config_path)
    client = JenkinsClient(config.target_jenkins_url)
    reachable = asyncio.run(client.health_check())
    click.echo("reachable" if reachable else "unreachable")
    if not reachable:
        raise SystemExit(1)


@cli.command("show-config")
@click.option("--config", "config_path", default=None, help="Path to the JSON settings file.")
def show_config(config_path: str | None) -> None:
    """Print the non-secret settings as JSON."""
    click.echo(json.dumps(_load(config_path).public_view(), indent=2))
