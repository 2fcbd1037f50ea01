"""Command line interface entry point."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime

import click

from postback_tester.catalog import (
    CatalogError,
    DeliveryLogFilter,
    DeliveryStatus,
    event_types,
    filter_postbacks,
)
from postback_tester.configuration import (
    DEFAULT_CONFIG_FILENAME,
    write_placeholder_configuration,
)
from postback_tester.results_writing import ExportFormat
from postback_tester.run_execution import (
    DeliveryLogReport,
    RunExecutionError,
    TestRequest,
    TestRunOutcome,
    execute_postback_tests,
    follow_postback_logs,
    list_postback_logs,
    load_run_configuration,
    open_catalog,
    parse_simulation_parameters,
    preview_postback_url,
    retry_postback,
    simulate_postback,
)
from postback_tester.url_templating import detect_placeholders

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class CliError(Exception):
    """Custom CLI error."""


def _parse_params(_ctx, _param, values: tuple[str, ...]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for item in values:
        name, separator, value = item.partition("=")
        if not separator or not name.strip():
            raise click.BadParameter(f"expected NAME=VALUE, got '{item}'")
        parsed[name.strip()] = value
    return parsed


_config_option = click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON test configuration file",
)
_param_option = click.option(
    "--param",
    "overrides",
    multiple=True,
    callback=_parse_params,
    metavar="NAME=VALUE",
    help="Placeholder value override; repeat for several placeholders",
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="postback-tester")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Verbosity of diagnostic logging on stderr",
)
def cli(log_level: str) -> None:
    """Postback URL template tester."""
    level = getattr(logging, log_level.upper())
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if level > logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML test configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML test configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="list-postbacks")
@_config_option
@click.option("--house", "house_id", type=int, help="Only templates of this betting house id")
@click.option("--event", "event_type", help="Only templates of this event type")
def list_postbacks(config_path: str, house_id: int | None, event_type: str | None) -> None:
    """List active postback templates and their placeholders."""
    try:
        catalog = open_catalog(load_run_configuration(config_path))
        all_postbacks = catalog.postbacks()
        templates = filter_postbacks(all_postbacks, house_id=house_id, event_type=event_type)
    except (RunExecutionError, CatalogError) as exc:
        raise CliError(str(exc)) from exc

    for template in templates:
        placeholders = ", ".join(detect_placeholders(template.url_template)) or "-"
        click.echo(
            f"{template.id}\t{template.house_name or template.house_id}\t"
            f"{template.event_type}\t{template.url_template}\t[{placeholders}]"
        )
    click.echo(f"event types: {', '.join(event_types(all_postbacks)) or '-'}", err=True)


@cli.command(name="preview")
@_config_option
@click.option("--postback", "postback_id", required=True, type=int, help="Template id")
@_param_option
def preview(config_path: str, postback_id: int, overrides: dict[str, str]) -> None:
    """Print the resolved URL of a template without sending it."""
    try:
        url = preview_postback_url(config_path, postback_id, overrides)
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    click.echo(url)


@cli.command(name="test")
@_config_option
@click.option("--postback", "postback_id", type=int, help="Test only this template id")
@click.option("--house", "house_id", type=int, help="Test active templates of this house id")
@click.option("--event", "event_type", help="Test active templates of this event type")
@_param_option
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Optional directory for exporting the test log",
)
@click.option(
    "--format",
    "export_format",
    type=click.Choice([item.value for item in ExportFormat]),
    default=ExportFormat.CSV.value,
    show_default=True,
    help="Test log export format",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Resolve URLs without sending any request.",
)
def run_tests(  # pylint: disable=too-many-arguments
    config_path: str,
    postback_id: int | None,
    house_id: int | None,
    event_type: str | None,
    overrides: dict[str, str],
    output_dir: str | None,
    export_format: str,
    dry_run: bool,
) -> None:
    """Send test requests for the selected postback templates."""
    try:
        outcome = execute_postback_tests(
            TestRequest(
                config_path=config_path,
                postback_id=postback_id,
                house_id=house_id,
                event_type=event_type,
                overrides=overrides,
                output_dir=output_dir,
                export_format=ExportFormat(export_format),
                dry_run=dry_run,
            )
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    _echo_outcome(outcome)


def _echo_outcome(outcome: TestRunOutcome) -> None:
    for test in outcome.tests:
        if test.result is None:
            click.echo(f"{test.template.id}\tSKIPPED\t{test.url}")
            continue
        result = test.result
        click.echo(
            f"{test.template.id}\t{result.status} {result.status_text}\t"
            f"{result.response_time_ms}ms\t{test.url}"
        )
    if not outcome.dry_run:
        click.echo(f"{outcome.succeeded}/{len(outcome.tests)} succeeded")
    if outcome.export_path is not None:
        click.echo(str(outcome.export_path))


@cli.command(name="logs")
@_config_option
@click.option("--limit", type=click.IntRange(min=1), default=10, show_default=True)
@click.option("--house", "house_id", type=int, help="Only calls of this betting house id")
@click.option("--event", "event_type", help="Only calls of this event type")
@click.option(
    "--status",
    type=click.Choice([item.value for item in DeliveryStatus]),
    help="Only successful, failed or test calls",
)
@click.option("--subid", help="Only calls whose subid contains this text (case-insensitive)")
@click.option("--since", type=click.DateTime(formats=["%Y-%m-%d"]), help="First day, inclusive")
@click.option("--until", type=click.DateTime(formats=["%Y-%m-%d"]), help="Last day, inclusive")
@click.option("--follow", is_flag=True, default=False, help="Keep polling for new entries")
@click.option("--interval", type=click.IntRange(min=1), help="Polling interval in seconds")
def logs(  # pylint: disable=too-many-arguments
    config_path: str,
    limit: int,
    house_id: int | None,
    event_type: str | None,
    status: str | None,
    subid: str | None,
    since: datetime | None,
    until: datetime | None,
    follow: bool,
    interval: int | None,
) -> None:
    """Show postback calls recorded by the backend."""
    criteria = DeliveryLogFilter(
        house_id=house_id,
        event_type=event_type,
        status=DeliveryStatus(status) if status else None,
        subid=subid,
        since=since.date() if since else None,
        until=until.date() if until else None,
    )
    try:
        if not follow:
            _echo_delivery_report(list_postback_logs(config_path, limit=limit, criteria=criteria))
            return
        scheduler = follow_postback_logs(
            config_path,
            _echo_delivery_report,
            limit=limit,
            criteria=criteria,
            interval_seconds=interval,
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc

    scheduler.start()
    try:
        scheduler.wait()
    except KeyboardInterrupt:
        click.echo("stopped following postback logs", err=True)
    finally:
        scheduler.stop()


def _echo_delivery_report(report: DeliveryLogReport) -> None:
    for entry in report.logs:
        marker = "" if entry.succeeded else " FAILED"
        house = entry.house_name or f"house {entry.house_id}"
        click.echo(
            f"{entry.id}\t{entry.status_code}{marker}\t{entry.event_type} - {entry.subid}\t"
            f"{house}\t{entry.executed_at}"
        )
    summary = report.summary
    click.echo(
        f"{summary.total} logs: {summary.success} success, {summary.failure} failure, "
        f"{summary.tests} test"
    )


@cli.command(name="simulate")
@_config_option
@click.option("--house", "house_id", required=True, type=int, help="Betting house id")
@click.option("--event", "event_type", required=True, help="Event type to simulate")
@click.option(
    "--params-json",
    "params_json",
    default="{}",
    show_default=True,
    help="JSON object of postback parameters",
)
def simulate(config_path: str, house_id: int, event_type: str, params_json: str) -> None:
    """Have the backend process a postback as if the house had sent it."""
    try:
        parameters = parse_simulation_parameters(params_json)
        response = simulate_postback(config_path, house_id, event_type, parameters)
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    click.echo(response if isinstance(response, str) else json.dumps(response, indent=2))


@cli.command(name="retry")
@_config_option
@click.argument("log_id", type=int)
def retry(config_path: str, log_id: int) -> None:
    """Ask the backend to resend a logged postback."""
    try:
        retry_postback(config_path, log_id)
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    click.echo(f"postback log {log_id} resent")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
