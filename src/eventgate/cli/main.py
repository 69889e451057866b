"""Click CLI group: check-config, normalize, and serve commands."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from eventgate.config import get_settings, validate_settings
from eventgate.context import build_resolver
from eventgate.enrich import enrich
from eventgate.errors import ConfigError, IngestError
from eventgate.models import VARIANTS, CompactEvent
from eventgate.normalizer import normalize, parse, validate


@click.group()
def cli() -> None:
    """Eventgate ingest service CLI."""


@cli.command("check-config")
def check_config() -> None:
    """Validate the environment configuration."""
    settings = get_settings()
    try:
        validate_settings(settings)
    except ConfigError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    click.echo(
        f"ok: stream={settings.stream_name} backend={settings.stream_backend} "
        f"schema={settings.schema_generation}"
    )


@cli.command("normalize")
@click.argument("variant", type=click.Choice(sorted(VARIANTS)))
@click.argument("body_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--project-id", default=None, help="Tenant for compact bodies.")
@click.option("--user-id", default=None, help="Caller for compact bodies.")
@click.option("--token", default=None, help="Bearer token to resolve tenant and caller from.")
@click.option("--enrich/--no-enrich", "with_enrich", default=False, show_default=True)
def normalize_body(
    variant: str,
    body_file: Path,
    project_id: str | None,
    user_id: str | None,
    token: str | None,
    with_enrich: bool,
) -> None:
    """Print the canonical event a request body would be published as."""
    try:
        if token:
            identity = build_resolver(get_settings()).resolve(f"Bearer {token}")
            project_id, user_id = identity.project_id, identity.user_id
        raw = parse(variant, body_file.read_bytes())
        validate(raw)
        if isinstance(raw, CompactEvent) and not project_id:
            project_id = get_settings().default_project_id
        event = normalize(raw, project_id, user_id)
        if with_enrich:
            event = enrich(event, {})
    except IngestError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    click.echo(json.dumps(event.model_dump(mode="json", by_alias=True), indent=2))


@cli.command()
@click.option("--host", default=None, help="Bind host (default: BIND_HOST).")
@click.option("--port", type=int, default=None, help="Bind port (default: BIND_PORT).")
def serve(host: str | None, port: int | None) -> None:
    """Run the ingest API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "eventgate.main:app",
        host=host or settings.bind_host,
        port=port or settings.bind_port,
        log_config=None,
    )


if __name__ == "__main__":
    cli()
