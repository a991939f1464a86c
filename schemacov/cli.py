"""CLI entrypoint: run assertion suites and measure keyword coverage."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click

from .config import Settings, load_settings
from .coverage import run_coverage
from .errors import SchemacovError
from .io import load_schemas, load_suites, load_targets
from .lib.log import configure_logging
from .reporters import REPORTER_KINDS, create_reporter
from .runner import run_suites

EXIT_MISMATCH = 1
EXIT_ERROR = 2

_existing_path = click.Path(exists=True, path_type=Path)


@dataclass
class AppEnv:
    settings: Settings


def _abort(exc: Exception) -> NoReturn:
    click.echo(f"error: {exc}", err=True)
    raise SystemExit(EXIT_ERROR)


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines on stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, json_logs: bool) -> None:
    """Run JSON Schema draft-4 suites and measure their keyword coverage."""
    try:
        settings = load_settings(verbose=verbose or None, json_logs=json_logs or None)
    except SchemacovError as exc:
        _abort(exc)
    configure_logging(verbose=settings.verbose, json_logs=settings.json_logs)
    ctx.obj = AppEnv(settings=settings)


@cli.command("validate")
@click.option("--schema", "schema_paths", multiple=True, type=_existing_path, help="Schema file or directory.")
@click.option("--suite", "suite_paths", multiple=True, required=True, type=_existing_path, help="Suite file or directory.")
@click.pass_obj
def validate_command(env: AppEnv, schema_paths: tuple[Path, ...], suite_paths: tuple[Path, ...]) -> None:
    """Check every test case's declared validity against the engine."""
    try:
        schemas = load_schemas(schema_paths)
        suites = load_suites(suite_paths)
        report = run_suites(suites, schemas, settings=env.settings)
    except SchemacovError as exc:
        _abort(exc)

    for failure in report.failures:
        location = f"{failure.source} " if failure.source else ""
        click.echo(f'  [FAIL] {location}"{failure.suite}" "{failure.description}"')
    click.echo(report.summary())
    if not report.passed:
        raise SystemExit(EXIT_MISMATCH)


@cli.command("coverage")
@click.option("--schema", "schema_paths", multiple=True, type=_existing_path, help="Schema file or directory.")
@click.option("--suite", "suite_paths", multiple=True, required=True, type=_existing_path, help="Suite file or directory.")
@click.option(
    "--target",
    "target_paths",
    multiple=True,
    type=_existing_path,
    help="Schemas whose coverage is measured (defaults to --schema).",
)
@click.option("--format", "report_format", type=click.Choice(REPORTER_KINDS), default=None, help="Report format.")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write report to file.")
@click.pass_obj
def coverage_command(
    env: AppEnv,
    schema_paths: tuple[Path, ...],
    suite_paths: tuple[Path, ...],
    target_paths: tuple[Path, ...],
    report_format: str | None,
    output: Path | None,
) -> None:
    """Measure how thoroughly the suites exercise the target schemas."""
    try:
        settings = env.settings.with_overrides(reporter=report_format)
        schemas = load_schemas(schema_paths)
        suites = load_suites(suite_paths)
        targets = load_targets(target_paths or schema_paths)
        run = run_coverage(schemas, suites, targets, settings=settings)
        rendered = create_reporter(settings.reporter, settings).render(run.results)
    except SchemacovError as exc:
        _abort(exc)

    if output is not None:
        output.write_text(rendered, encoding="utf-8")
    else:
        click.echo(rendered)


def main() -> None:
    cli()
