"""CLI smoke tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from modelintel.cli.main import main
from tests._helpers.expect import expect_equal, expect_in


def _run(capsys: pytest.CaptureFixture[str], *argv: str) -> tuple[int, dict[str, object]]:
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, (json.loads(out) if out.strip() else {})


def test_schema_command_prints_tables_and_anomalies(
    project_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """The schema command dumps folded tables and tolerated anomalies."""
    code, payload = _run(capsys, "schema", "--project-root", str(project_root), "--table", "users")
    expect_equal(code, 0)
    tables = payload["tables"]
    if not isinstance(tables, dict) or list(tables) != ["users"]:
        pytest.fail(f"Expected only the users table, got {tables!r}")
    expect_equal(tables["users"]["role"], {"type": "enum", "nullable": False, "options": ["admin", "member"]})
    expect_equal(len(payload["anomalies"]), 1)


def test_property_command(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """The property command prints readable and writable types."""
    code, payload = _run(
        capsys, "property", "--project-root", str(project_root), "tests.fixtures.models.User", "is_admin"
    )
    expect_equal(code, 0)
    expect_equal((payload["readable"], payload["writable"]), ("bool", "bool | Literal[0] | Literal[1]"))

    code, payload = _run(
        capsys, "property", "--project-root", str(project_root), "tests.fixtures.models.User", "legacy"
    )
    expect_equal(code, 2)
    expect_equal(payload["state"], "absent")


def test_method_command(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """The method command describes forwarded methods."""
    code, payload = _run(
        capsys, "method", "--project-root", str(project_root), "tests.fixtures.models.Mail", "send"
    )
    expect_equal(code, 0)
    expect_equal(payload["declaring_class"], "tests.fixtures.models.Mailer")
    expect_equal((payload["static"], payload["public"]), (True, True))
    expect_equal(payload["parameters"], ["to", "body"])
    expect_equal(payload["variadic"], False)


def test_failures_are_logged_as_problems(
    project_root: Path, capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    """Unknown classes exit 1 with a Problem Detail log record."""
    with caplog.at_level(logging.ERROR, logger="modelintel.cli"):
        code, payload = _run(
            capsys, "method", "--project-root", str(project_root), "tests.fixtures.models.Nope", "x"
        )
    expect_equal(code, 1)
    expect_equal(payload, {})
    expect_in("cli.failure", caplog.text)
