"""CLI entry point for icsgen."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

import typer

from icsgen import __version__
from icsgen.ics import (
    Alert,
    Recurrence,
    export_calendar,
    export_events,
    format_error_for_user,
    import_calendar,
    load_config,
    validate,
    validate_create_params,
)
from icsgen.ics.calendar import read_calendar_text, render_export_filename
from icsgen.ics.config import resolve_export_dir, resolve_timezone
from icsgen.ics.models import CalendarEvent, ValidationCategory

app = typer.Typer()
ics_app = typer.Typer(help="iCalendar (.ics) tools")
app.add_typer(ics_app, name="ics")


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        typer.echo(f"icsgen version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """Generate, import and validate iCalendar files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _format_event_value(value: date | datetime) -> str:
    return value.isoformat()


def _display_end_for_event(event: CalendarEvent) -> date | datetime:
    if event.all_day and isinstance(event.end, date) and not isinstance(event.end, datetime):
        if event.end > event.start:
            return event.end - timedelta(days=1)
    return event.end


def _format_event_compact(event: CalendarEvent) -> str:
    start_str = _format_event_value(event.start)
    end_str = _format_event_value(_display_end_for_event(event))
    return f"{event.uid} | {start_str} -> {end_str} | {event.title}"


def _format_event_detail(event: CalendarEvent) -> str:
    lines = [
        f"UID: {event.uid}",
        f"Title: {event.title}",
        f"Start: {_format_event_value(event.start)}",
        f"End: {_format_event_value(_display_end_for_event(event))}",
        f"All-day: {'yes' if event.all_day else 'no'}",
    ]
    if event.location is not None:
        lines.append(f"Location: {event.location}")
    if event.notes is not None:
        lines.append(f"Notes: {event.notes}")
    if event.url is not None:
        lines.append(f"URL: {event.url}")
    if event.alert is not Alert.NONE:
        lines.append(f"Alert: {event.alert.value}")
    if event.recurrence is not Recurrence.NONE:
        lines.append(f"Recurrence: {event.recurrence.value}")
    return "\n".join(lines)


@ics_app.command("export")
def ics_export(
    summary: str = typer.Option(..., "--summary", "-s", help="Event title."),
    start: str = typer.Option(..., "--start", help="Event start (ISO 8601)."),
    end: Optional[str] = typer.Option(None, "--end", help="Event end (ISO 8601, optional)."),
    all_day: bool = typer.Option(False, "--all-day", help="Create an all-day event."),
    location: Optional[str] = typer.Option(None, "--location", help="Event location."),
    description: Optional[str] = typer.Option(None, "--description", help="Event notes."),
    url: Optional[str] = typer.Option(None, "--url", help="Event URL."),
    alert: str = typer.Option(
        Alert.FIFTEEN_MINUTES.value,
        "--alert",
        help=f"Alert before start. Options: {', '.join(item.value for item in Alert)}.",
    ),
    recurrence: Optional[str] = typer.Option(
        None,
        "--recurrence",
        help="Recurrence (DAILY, WEEKLY, MONTHLY, YEARLY or CUSTOM).",
    ),
    interval: int = typer.Option(1, "--interval", help="Recurrence interval."),
    count: Optional[int] = typer.Option(None, "--count", help="Number of occurrences."),
    until: Optional[str] = typer.Option(None, "--until", help="Recurrence end (ISO 8601)."),
    by_day: Optional[str] = typer.Option(None, "--by-day", help="Weekdays, e.g. MO,WE,FR."),
    tz: Optional[str] = typer.Option(
        None,
        "--tz",
        help="Timezone for naive input times (IANA name like Europe/Berlin, default UTC).",
    ),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output .ics file path."),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Directory for the generated file name (defaults to ICSGEN_EXPORT_DIR).",
    ),
    filename_template: Optional[str] = typer.Option(
        None,
        "--filename-template",
        help="File name template ({title}, {year}, {month}, {day}, {timestamp}, {currentDate}, {count}).",
    ),
    stdout: bool = typer.Option(False, "--stdout", help="Print the calendar instead of writing a file."),
):
    """Export one event as a validated .ics file."""
    try:
        config = load_config()
        event = validate_create_params(
            title=summary,
            start=start,
            end=end,
            all_day=all_day,
            location=location,
            notes=description,
            url=url,
            alert=alert,
            recurrence=recurrence,
            interval=interval,
            count=count,
            until=until,
            by_day=by_day,
            tz=resolve_timezone(tz),
        )
        if stdout:
            result = export_events([event], config=config)
        else:
            path: Optional[Path] = Path(output).expanduser() if output else None
            if path is None:
                template = filename_template or config.filename_template
                directory = resolve_export_dir(Path(output_dir) if output_dir else None)
                path = directory / render_export_filename(template, [event])
            result = export_calendar([event], path=path, config=config)
    except Exception as exc:
        typer.secho(format_error_for_user(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if stdout:
        typer.echo(result.text, nl=False)
        return
    typer.echo(f"✅ Exported event {event.uid} to {result.path}")
    typer.echo(_format_event_compact(event))


@ics_app.command("import")
def ics_import(
    file: str = typer.Option(..., "--file", "-f", help="Calendar file to import."),
    detail: bool = typer.Option(False, "--detail", help="Show all fields of each event."),
):
    """Import events from an .ics file and list them."""
    try:
        result = import_calendar(Path(file).expanduser())
    except Exception as exc:
        typer.secho(format_error_for_user(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    for warning in result.warnings:
        typer.secho(f"⚠️  {warning.description}: {warning.message}", fg=typer.colors.YELLOW, err=True)

    if not result.events:
        typer.echo("No events found.")
        return

    for event in result.events:
        typer.echo(_format_event_detail(event) if detail else _format_event_compact(event))
        if detail:
            typer.echo("")
    typer.echo(f"Total: {len(result.events)} event(s)")


@ics_app.command("validate")
def ics_validate(
    file: str = typer.Option(..., "--file", "-f", help="Calendar file to validate."),
    only_failed: bool = typer.Option(False, "--only-failed", help="Show failed checks only."),
):
    """Check an .ics file for iCalendar conformance."""
    try:
        config = load_config()
        checks = validate(read_calendar_text(Path(file).expanduser()), config=config)
    except Exception as exc:
        typer.secho(format_error_for_user(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    failed = [check for check in checks if not check.passed]
    for category in ValidationCategory:
        grouped = [check for check in checks if check.category is category]
        if only_failed:
            grouped = [check for check in grouped if not check.passed]
        if not grouped:
            continue
        typer.echo(f"[{category.value}]")
        for check in grouped:
            mark = "✅" if check.passed else "❌"
            typer.echo(f"{mark} {check.description}: {check.message or ''}")

    typer.echo(f"Checks: {len(checks)}, failed: {len(failed)}")
    if failed:
        raise typer.Exit(code=1)


def cli():
    """Entry point for the CLI."""
    app()
