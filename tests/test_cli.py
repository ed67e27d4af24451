import pytest
from typer.testing import CliRunner

from icsgen import __version__
from icsgen.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in ("ICSGEN_PRODID", "ICSGEN_FOLD_LIMIT", "ICSGEN_FOLD_MODE", "ICSGEN_FILENAME_TEMPLATE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ICSGEN_EXPORT_DIR", str(tmp_path / "exports"))


def _export(*args: str):
    return runner.invoke(app, ["ics", "export", "--summary", "Team sync", "--start", "2026-02-01T09:00", *args])


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"icsgen version {__version__}" in result.output


def test_export_to_stdout():
    result = _export("--recurrence", "WEEKLY", "--interval", "2", "--by-day", "MO,WE", "--stdout")

    assert result.exit_code == 0
    assert result.output.startswith("BEGIN:VCALENDAR")
    assert "SUMMARY:Team sync" in result.output
    assert "RRULE:FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE" in result.output
    assert "TRIGGER:-PT15M" in result.output


def test_export_to_file(tmp_path):
    path = tmp_path / "sync.ics"

    result = _export("--end", "2026-02-01T10:00", "--output", str(path))

    assert result.exit_code == 0
    assert "✅ Exported event" in result.output
    assert path.read_bytes().startswith(b"BEGIN:VCALENDAR\r\n")


def test_export_uses_filename_template(tmp_path):
    result = _export("--output-dir", str(tmp_path), "--filename-template", "{title}-{month}")

    assert result.exit_code == 0
    assert (tmp_path / "Team sync-02.ics").exists()


def test_export_defaults_to_export_dir(tmp_path):
    result = _export()

    assert result.exit_code == 0
    assert (tmp_path / "exports" / "2026-01.ics").exists()


def test_export_all_day_event():
    result = runner.invoke(
        app,
        ["ics", "export", "--summary", "Holiday", "--start", "2026-12-24", "--end", "2026-12-25", "--all-day", "--stdout"],
    )

    assert result.exit_code == 0
    assert "DTSTART;VALUE=DATE:20261224" in result.output
    assert "DTEND;VALUE=DATE:20261226" in result.output


def test_export_reports_invalid_input():
    result = runner.invoke(app, ["ics", "export", "--summary", "Team sync", "--start", "tomorrow", "--stdout"])

    assert result.exit_code == 1
    assert "Validation Error" in result.output


def test_export_reports_failed_checks():
    result = runner.invoke(app, ["ics", "export", "--summary", "Café", "--start", "2026-02-01T09:00", "--stdout"])

    assert result.exit_code == 1
    assert "Export Error: Character encoding" in result.output


def test_export_rejects_bad_configuration(monkeypatch):
    monkeypatch.setenv("ICSGEN_FOLD_MODE", "words")

    result = _export("--stdout")

    assert result.exit_code == 1
    assert "Validation Error" in result.output


def test_import_lists_events(tmp_path):
    path = tmp_path / "sync.ics"
    _export("--output", str(path))

    result = runner.invoke(app, ["ics", "import", "--file", str(path)])

    assert result.exit_code == 0
    assert "2026-02-01T09:00:00+00:00 -> 2026-02-01T10:00:00+00:00 | Team sync" in result.output
    assert "Total: 1 event(s)" in result.output


def test_import_detail_shows_all_day_end_inclusive(tmp_path):
    path = tmp_path / "holiday.ics"
    runner.invoke(
        app,
        ["ics", "export", "--summary", "Holiday", "--start", "2026-12-24", "--end", "2026-12-25", "--all-day", "--output", str(path)],
    )

    result = runner.invoke(app, ["ics", "import", "--file", str(path), "--detail"])

    assert result.exit_code == 0
    assert "End: 2026-12-25" in result.output
    assert "All-day: yes" in result.output


def test_import_of_missing_file():
    result = runner.invoke(app, ["ics", "import", "--file", "/nonexistent/calendar.ics"])

    assert result.exit_code == 1
    assert "File Error" in result.output


def test_import_of_invalid_structure(tmp_path):
    path = tmp_path / "broken.ics"
    path.write_text("BEGIN:VEVENT\nSUMMARY:X\nEND:VEVENT\n", encoding="utf-8")

    result = runner.invoke(app, ["ics", "import", "--file", str(path)])

    assert result.exit_code == 1
    assert "Structure Error" in result.output


def test_validate_valid_file(tmp_path):
    path = tmp_path / "sync.ics"
    _export("--output", str(path))

    result = runner.invoke(app, ["ics", "validate", "--file", str(path)])

    assert result.exit_code == 0
    assert "[structure]" in result.output
    assert "✅ Basic iCalendar structure" in result.output
    assert "failed: 0" in result.output


def test_validate_invalid_file(tmp_path):
    path = tmp_path / "bad.ics"
    path.write_text(
        "BEGIN:VCALENDAR\r\nVERSION:2.0\r\nBEGIN:VEVENT\r\nUID:1\r\nSUMMARY:X\r\nSTATUS:MAYBE\r\n"
        "DTSTART:20240101T100000Z\r\nDTEND:20240101T110000Z\r\nEND:VEVENT\r\nEND:VCALENDAR\r\n",
        encoding="utf-8",
    )

    result = runner.invoke(app, ["ics", "validate", "--file", str(path), "--only-failed"])

    assert result.exit_code == 1
    assert "❌ Event status" in result.output
    assert "✅" not in result.output
    assert "failed: 1" in result.output
