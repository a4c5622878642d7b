"""CLI entry point - Click commands for injectguard."""

from __future__ import annotations

import dataclasses
import logging
import sys

import click

from injectguard import __version__
from injectguard.cli._output import (
    format_json,
    format_rules_json,
    format_rules_text,
    format_text,
)
from injectguard.cli._runner import run_check
from injectguard.core._types import Severity
from injectguard.core.config import (
    BUILTIN_PROFILES,
    ConfigError,
    InjectguardConfig,
    load_config,
)
from injectguard.rules import ALL_RULES

_SEVERITIES = [str(s) for s in Severity]


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", message="injectguard %(version)s")
def cli() -> None:
    """injectguard - readonly checks for injected TypeScript services."""


@cli.command()
@click.argument("paths", nargs=-1, required=True)
@click.option("--fix", is_flag=True, help="Write fixes back to the source files.")
@click.option("--strict", is_flag=True, help="Exit 1 on any remaining diagnostics.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option("--exclude-rules", default="", help="Comma-separated rule IDs to exclude.")
@click.option(
    "--min-severity",
    type=click.Choice(_SEVERITIES),
    default="info",
    help="Minimum severity to report.",
)
@click.option("--no-color", is_flag=True, envvar="NO_COLOR", help="Disable ANSI colors.")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to .injectguard.toml or pyproject.toml config file.",
)
@click.option(
    "--profile",
    type=click.Choice(list(BUILTIN_PROFILES)),
    default=None,
    help=(
        "Rule filter profile (overrides config file profile). "
        "minimal keeps errors only, so it silences the warning-level RO-001."
    ),
)
@click.option(
    "--service-marker",
    default=None,
    help="Substring identifying injected service members (default: service).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log analysis trace events.")
def check(
    paths: tuple[str, ...],
    fix: bool,
    strict: bool,
    fmt: str,
    exclude_rules: str,
    min_severity: str,
    no_color: bool,
    config_path: str | None,
    profile: str | None,
    service_marker: str | None,
    verbose: bool,
) -> None:
    """Lint TypeScript sources from their ESTree JSON dumps.

    Each PATH is a source file (foo.ts) or its syntax tree (foo.ts.json);
    both files must exist side by side.
    """
    if verbose:
        _setup_logging()

    try:
        config: InjectguardConfig = load_config(config_path)
        if service_marker is not None:
            config = dataclasses.replace(config, service_marker=service_marker)
    except ConfigError as exc:
        click.echo(f"Error: invalid config: {exc}", err=True)
        sys.exit(2)

    if profile is not None:
        base = BUILTIN_PROFILES[profile]
        # --profile overrides filter settings; config file exclusions are additive.
        config = dataclasses.replace(
            config,
            min_severity=base.min_severity,
            include_rules=base.include_rules,
            categories=base.categories,
            exclude_rules=base.exclude_rules | config.exclude_rules,
        )

    excluded = {r.strip() for r in exclude_rules.split(",") if r.strip()} if exclude_rules else None
    severity = Severity(min_severity)

    report = run_check(paths, config=config, exclude_rules=excluded, fix=fix)

    if fmt == "json":
        click.echo(format_json(report, min_severity=severity))
    else:
        click.echo(format_text(report, min_severity=severity, no_color=no_color))

    if report.errors:
        sys.exit(2)
    if strict and report.filtered(severity):
        sys.exit(1)


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option("--no-color", is_flag=True, envvar="NO_COLOR", help="Disable ANSI colors.")
@click.option("--layer", default=None, help="Filter by layer prefix (e.g. class).")
@click.option(
    "--severity",
    "sev",
    default=None,
    type=click.Choice(_SEVERITIES),
    help="Filter by severity.",
)
def rules(fmt: str, no_color: bool, layer: str | None, sev: str | None) -> None:
    """List all lint rules."""
    filtered = list(ALL_RULES)
    if layer is not None:
        filtered = [r for r in filtered if r.layer == layer or r.layer.startswith(layer + ".")]
    if sev is not None:
        severity = Severity(sev)
        filtered = [r for r in filtered if r.severity == severity]

    total = len(ALL_RULES) if (layer is not None or sev is not None) else None

    if fmt == "json":
        click.echo(format_rules_json(filtered))
    else:
        click.echo(format_rules_text(filtered, no_color=no_color, total=total))
