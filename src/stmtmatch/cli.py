from __future__ import annotations

import json
import logging
import os
import sys

import click

from . import __version__ as VERSION
from .compare import ComparisonResult, compare_statements
from .config import comparison_config, refresh_config
from .errors import FixtureFormatError, StmtMatchError, TimestampMismatchError
from .fixtures import iter_fixtures, load_json, statement_id_from_filename, validate_fixture
from .normalize import normalize
from .types import ComparisonReport

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.pass_context
@click.option("--version", is_flag=True, help="Show the version and exit.")
@click.option("--debug", is_flag=True, help="Log normalization details to stderr.")
def main(ctx, version, debug):
    """stmtmatch: compare expected and retrieved statements"""
    ctx.obj = {"config": refresh_config()}
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if version:
        click.echo(f"stmtmatch version {VERSION}")
        return
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _emit_structured_error(message: str, *, code: str, category: str, as_json: bool = False, exit_code: int = 2):
    payload = {
        "ok": False,
        "error": {
            "code": code,
            "category": category,
            "message": message,
        },
    }
    if as_json:
        click.echo(json.dumps(payload, indent=2, sort_keys=True))
    else:
        prefix = "stmtmatch internal error" if code == "INTERNAL" else "stmtmatch error"
        click.echo(f"{prefix} [{category}:{code}]: {message}")
    sys.exit(exit_code)


def _load_pair(expected_path: str, actual_path: str, statement_id: str | None):
    """Load the expected structure and the retrieved statement.

    The expected file may be a fixture (with ``structure``) or a bare statement.
    Fixture files also supply the tracked statement id through their name.
    """
    expected_doc = load_json(expected_path)
    if isinstance(expected_doc, dict) and "structure" in expected_doc:
        expected = validate_fixture(expected_doc, expected_path)["structure"]
        statement_id = statement_id or statement_id_from_filename(expected_path)
    else:
        expected = expected_doc
    actual = load_json(actual_path)
    return expected, actual, statement_id


def _build_report(result: ComparisonResult, expect_differ: bool) -> ComparisonReport:
    return {
        "matched": result.matched,
        "expect_differ": expect_differ,
        "passed": result.matched != expect_differ,
        "mode": result.mode,
        "summary": result.summary,
        "changes": result.changes,
    }


def _print_report(report: ComparisonReport, result: ComparisonResult, verbose: bool = False):
    click.echo("Statement Comparison Report")
    click.echo("---------------------------")
    click.echo(f"Mode: {report['mode']}")
    click.echo(f"Expectation: {'differ' if report['expect_differ'] else 'match'}")
    click.echo(f"Summary: {report['summary']}")
    if report["changes"]:
        click.echo(result.human_diff)
    if verbose:
        click.echo("Expected (normalized):")
        click.echo(json.dumps(result.expected, indent=2, sort_keys=True))
        click.echo("Actual (normalized):")
        click.echo(json.dumps(result.actual, indent=2, sort_keys=True))
    click.echo("PASS" if report["passed"] else "FAIL")


@main.command()
@click.pass_context
@click.argument("expected_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("actual_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--meaning-only", is_flag=True, help="Ignore version, stored and authority.")
@click.option("--expect-differ", is_flag=True, help="Pass only when the statements differ.")
@click.option("--statement-id", help="Statement id to default into the expected side.")
@click.option("--verbose", is_flag=True, help="Print both normalized statements.")
@click.option("--json", "json_output", is_flag=True, help="Emit a machine-readable report.")
def compare(ctx, expected_file, actual_file, meaning_only, expect_differ, statement_id, verbose, json_output):
    """Compare a retrieved statement against its expected structure."""
    try:
        expected, actual, statement_id = _load_pair(expected_file, actual_file, statement_id)
        config = comparison_config(meaning_only=True if meaning_only else None, config=ctx.obj["config"])
        try:
            result = compare_statements(actual, expected, config, statement_id=statement_id)
        except TimestampMismatchError as exc:
            if expect_differ:
                if json_output:
                    click.echo(json.dumps({"ok": True, "passed": True, "reason": exc.reason_code}, indent=2, sort_keys=True))
                else:
                    click.echo(f"Timestamps differ: {exc.explanation}\nPASS")
                sys.exit(0)
            _emit_structured_error(exc.explanation, code=exc.error_code, category=exc.category, as_json=json_output, exit_code=1)

        report = _build_report(result, expect_differ)
        if json_output:
            click.echo(json.dumps(report, indent=2, sort_keys=True, default=str))
        else:
            _print_report(report, result, verbose=verbose)
        sys.exit(0 if report["passed"] else 1)
    except SystemExit:
        raise
    except StmtMatchError as exc:
        _emit_structured_error(exc.explanation, code=exc.error_code, category=exc.category, as_json=json_output, exit_code=2)
    except Exception as exc:
        logger.exception("Unhandled stmtmatch compare error")
        _emit_structured_error(str(exc), code="INTERNAL", category="SYSTEM", as_json=json_output, exit_code=2)


@main.command(name="normalize")
@click.pass_context
@click.argument("expected_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("actual_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--meaning-only", is_flag=True, help="Ignore version, stored and authority.")
@click.option("--statement-id", help="Statement id to default into the expected side.")
def normalize_command(ctx, expected_file, actual_file, meaning_only, statement_id):
    """Print both statements as they are compared."""
    try:
        expected, actual, statement_id = _load_pair(expected_file, actual_file, statement_id)
        config = comparison_config(meaning_only=True if meaning_only else None, config=ctx.obj["config"])
        pair = normalize(actual, expected, config, statement_id=statement_id)
    except StmtMatchError as exc:
        _emit_structured_error(exc.explanation, code=exc.error_code, category=exc.category, exit_code=2)
    except Exception as exc:
        logger.exception("Unhandled stmtmatch normalize error")
        _emit_structured_error(str(exc), code="INTERNAL", category="SYSTEM", exit_code=2)
    click.echo(json.dumps({"expected": pair.expected, "actual": pair.actual}, indent=2, sort_keys=True))


def _check_fixture(path: str, fixture, retrieved_dir: str, config) -> dict:
    name = os.path.basename(path)
    statement_id = statement_id_from_filename(path)
    retrieved_path = os.path.join(retrieved_dir, name)
    row = {"fixture": name, "statement_id": statement_id, "status": "failed", "summary": "", "changes": []}
    if not os.path.exists(retrieved_path):
        row["status"] = "missing"
        row["summary"] = f"No retrieved statement at {retrieved_path}"
        return row

    try:
        actual = load_json(retrieved_path)
    except FixtureFormatError as exc:
        row["summary"] = exc.explanation
        return row
    try:
        result = compare_statements(actual, fixture["structure"], config, statement_id=statement_id)
    except TimestampMismatchError as exc:
        row["summary"] = exc.explanation
        row["changes"] = exc.changes
        return row
    row["status"] = "passed" if result.matched else "failed"
    row["summary"] = result.summary
    row["changes"] = result.changes
    row["human_diff"] = result.human_diff
    return row


def _print_check_report(rows: list, fixture_dir: str):
    failed = [row for row in rows if row["status"] != "passed"]
    click.echo("Fixture Check Report")
    click.echo("--------------------")
    click.echo(f"Fixture directory: {fixture_dir}")
    click.echo(f"Fixtures checked: {len(rows)}")
    click.echo(f"Failures: {len(failed)}")
    click.echo()
    for row in rows:
        if row["status"] == "passed":
            click.echo(f"PASS: {row['fixture']}")
            continue
        click.echo(f"{'MISSING' if row['status'] == 'missing' else 'FAIL'}: {row['fixture']}")
        click.echo(f"Summary: {row['summary']}")
        if row.get("human_diff"):
            click.echo(row["human_diff"])
        click.echo()


@main.command()
@click.pass_context
@click.argument("retrieved_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--fixture-dir", help="Directory of fixtures (defaults to the configured fixture_dir).")
@click.option("--meaning-only", is_flag=True, help="Ignore version, stored and authority.")
@click.option("--json", "json_output", is_flag=True, help="Emit a machine-readable report.")
def check(ctx, retrieved_dir, fixture_dir, meaning_only, json_output):
    """Compare every fixture against the retrieved statement of the same name."""
    settings = ctx.obj["config"]
    fixture_dir = fixture_dir or settings.fixture_dir
    if not os.path.isdir(fixture_dir):
        _emit_structured_error(
            f"Fixture directory not found: {fixture_dir}", code="FIXTURE_DIR", category="FIXTURE", as_json=json_output
        )

    try:
        config = comparison_config(meaning_only=True if meaning_only else None, config=settings)
        rows = [_check_fixture(path, fixture, retrieved_dir, config) for path, fixture in iter_fixtures(fixture_dir)]
        if not rows:
            _emit_structured_error(
                f"No fixtures found in {fixture_dir}", code="NO_FIXTURES", category="FIXTURE", as_json=json_output
            )
        failed = [row for row in rows if row["status"] != "passed"]
        if json_output:
            payload = {"ok": not failed, "fixture_dir": fixture_dir, "checked": len(rows), "results": rows}
            click.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))
        else:
            _print_check_report(rows, fixture_dir)
        sys.exit(1 if failed else 0)
    except SystemExit:
        raise
    except StmtMatchError as exc:
        _emit_structured_error(exc.explanation, code=exc.error_code, category=exc.category, as_json=json_output, exit_code=2)
    except Exception as exc:
        logger.exception("Unhandled stmtmatch check error")
        _emit_structured_error(str(exc), code="INTERNAL", category="SYSTEM", as_json=json_output, exit_code=2)


if __name__ == "__main__":
    main()
