"""Command line entrypoint for the NiFi flow provider.

Usage::

    nifi-provider --host nifi:8080 root
    nifi-provider apply flow-state.json
    nifi-provider destroy flow-state.json

A state file is a JSON document holding the declared resources in dependency
order::

    {"resources": [{"type": "nifi_process_group", "id": "", "component": [...]}]}

A string value of the form ``"${N}"`` anywhere in an entry is replaced with
the id of entry ``N`` before the entry is applied, so a processor can be
declared under a process group created earlier in the same file::

    {"resources": [
        {"type": "nifi_process_group", "parent_group_id": "root", "component": [...]},
        {"type": "nifi_processor", "parent_group_id": "${0}", "component": [...]}
    ]}

Only earlier entries can be referenced. The rewritten file holds the
resolved ids.

``apply`` creates or updates every entry and rewrites the file with the
observed state; ``destroy`` deletes the tracked entries in reverse order.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from pathlib import Path
from typing import Any

import click

from nifi_provider.config import ProviderConfig
from nifi_provider.errors import ConfigurationError, NiFiError
from nifi_provider.provider import Provider
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


# ── State file ──────────────────────────────────────────────────────────


def _load_state(path: Path) -> list[ResourceData]:
    try:
        document = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{path} is not valid JSON: {exc}") from exc
    entries = document.get("resources") if isinstance(document, dict) else None
    if not isinstance(entries, list):
        raise click.ClickException(f"{path} must contain a 'resources' list")
    return [ResourceData.from_dict(entry) for entry in entries]


_REFERENCE = re.compile(r"^\$\{(\d+)\}$")


def _resolve_references(value: Any, resources: list[ResourceData], index: int) -> Any:
    """Replace ``"${N}"`` strings with the id of entry ``N`` of the state file."""
    if isinstance(value, str):
        match = _REFERENCE.match(value)
        if match is None:
            return value
        target = int(match.group(1))
        if target >= index or not resources[target].id:
            raise ConfigurationError(
                f"Entry {index} references {value}, which is not an earlier applied entry"
            )
        return resources[target].id
    if isinstance(value, list):
        return [_resolve_references(v, resources, index) for v in value]
    if isinstance(value, dict):
        return {k: _resolve_references(v, resources, index) for k, v in value.items()}
    return value


def _save_state(path: Path, resources: list[ResourceData]) -> None:
    document: dict[str, Any] = {"resources": [d.to_dict() for d in resources]}
    path.write_text(json.dumps(document, indent=2) + "\n")
    logger.debug("State written to %s", path)


# ── CLI definition ──────────────────────────────────────────────────────


@click.group("nifi-provider")
@click.option("--host", default=None, help="NiFi host[:port] (overrides NIFI_HOST env var).")
@click.option(
    "--api-path",
    default=None,
    help="REST API root path (overrides NIFI_API_PATH env var).",
)
@click.option(
    "--cert",
    type=click.Path(dir_okay=False),
    default=None,
    help="Client certificate for HTTPS (overrides NIFI_ADMIN_CERT env var).",
)
@click.option(
    "--key",
    type=click.Path(dir_okay=False),
    default=None,
    help="Client certificate key (overrides NIFI_ADMIN_KEY env var).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable DEBUG logging.")
@click.pass_context
def main(
    ctx: click.Context,
    host: str | None,
    api_path: str | None,
    cert: str | None,
    key: str | None,
    verbose: bool,
) -> None:
    """Reconcile declared NiFi flow resources against a live NiFi instance."""
    try:
        config = ProviderConfig.from_env(
            host=host,
            api_path=api_path,
            admin_cert=cert,
            admin_key=key,
            log_level="DEBUG" if verbose else None,
        )
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc
    config.configure_logging()
    ctx.obj = config


def _provider(ctx: click.Context) -> Provider:
    try:
        provider = Provider(ctx.obj)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(2)
    ctx.call_on_close(provider.close)
    return provider


@main.command()
@click.pass_context
def root(ctx: click.Context) -> None:
    """Print the id and name of the root process group."""
    provider = _provider(ctx)
    try:
        group = provider.root_process_group()
    except NiFiError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    click.echo(f"{group['id']}\t{group['name']}")


@main.command()
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def apply(ctx: click.Context, state_file: Path) -> None:
    """Create or update every resource declared in STATE_FILE."""
    resources = _load_state(state_file)
    provider = _provider(ctx)
    try:
        for index, d in enumerate(resources):
            for key, value in d.to_dict().items():
                if key not in ("type", "id"):
                    d.set(key, _resolve_references(value, resources, index))
            provider.apply(d)
            logger.info("%s %s applied", d.type, d.id)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(2)
    except NiFiError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    finally:
        _save_state(state_file, resources)
    click.echo(f"Applied {len(resources)} resource(s)")


@main.command()
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def destroy(ctx: click.Context, state_file: Path) -> None:
    """Delete every tracked resource in STATE_FILE, last declared first."""
    resources = _load_state(state_file)
    provider = _provider(ctx)
    try:
        for d in reversed(resources):
            tracked = d.id
            provider.destroy(d)
            if tracked:
                logger.info("%s %s destroyed", d.type, tracked)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(2)
    except NiFiError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    finally:
        _save_state(state_file, resources)
    click.echo(f"Destroyed {len(resources)} resource(s)")


if __name__ == "__main__":
    main()
