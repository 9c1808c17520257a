"""CLI entrypoint for inspecting inferred schemas, properties and methods."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from modelintel.config import AnalysisConfig, load_config
from modelintel.errors import ProblemError, log_problem, problem
from modelintel.methods import ForwardedMethodsExtension
from modelintel.properties import AnnotationsPropertyExtension, ModelPropertyExtension
from modelintel.reflection import RuntimeBroker
from modelintel.schema import SchemaRegistry
from modelintel.type_strings import CstTypeStringResolver
from modelintel.types import format_type

LOG = logging.getLogger("modelintel.cli")

CommandHandler = Callable[..., int]


# ---------------------------------------------------------------------------
# Argument parsing / logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure logging based on -v/--verbose count.

    0 -> WARNING, 1 -> INFO, 2+ -> DEBUG.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--project-root",
        type=Path,
        default=Path(),
        help="Project root holding pyproject.toml and the migrations (default: current directory)",
    )
    p.add_argument(
        "--migrations",
        type=Path,
        default=None,
        help="Override the migrations directory (relative to the project root)",
    )


def _load(args: argparse.Namespace) -> AnalysisConfig:
    overrides: dict[str, Any] = {}
    if args.migrations is not None:
        overrides["migrations_path"] = args.migrations
    cfg = load_config(args.project_root, **overrides)
    root = str(cfg.project_root)
    if root not in sys.path:
        sys.path.insert(0, root)
    return cfg


def _emit(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2))
    sys.stdout.write("\n")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_schema(args: argparse.Namespace) -> int:
    cfg = _load(args)
    registry = SchemaRegistry.from_config(cfg)
    registry.ensure_built()
    tables = {
        name: {
            column.name: {
                "type": column.stored_type,
                "nullable": column.nullable,
                **({"options": list(column.options)} if column.options else {}),
            }
            for column in table.columns.values()
        }
        for name, table in sorted(registry.tables.items())
        if args.table is None or name == args.table
    }
    _emit(
        {
            "tables": tables,
            "anomalies": [anomaly.describe() for anomaly in registry.anomalies],
        }
    )
    return 0


def _cmd_property(args: argparse.Namespace) -> int:
    cfg = _load(args)
    broker = RuntimeBroker()
    extension = ModelPropertyExtension(
        broker=broker,
        annotation_extension=AnnotationsPropertyExtension(),
        string_resolver=CstTypeStringResolver(),
        config=cfg,
        registry=SchemaRegistry.from_config(cfg),
    )
    class_ref = broker.get_class(args.class_name)
    if not extension.has_property(class_ref, args.name):
        _emit({"class": class_ref.name, "property": args.name, "state": extension.last_state})
        return 2
    prop = extension.get_property(class_ref, args.name)
    _emit(
        {
            "class": class_ref.name,
            "property": args.name,
            "readable": format_type(prop.readable_type),
            "writable": format_type(prop.writable_type),
        }
    )
    return 0


def _cmd_method(args: argparse.Namespace) -> int:
    cfg = _load(args)
    broker = RuntimeBroker()
    extension = ForwardedMethodsExtension(broker, cfg)
    class_ref = broker.get_class(args.class_name)
    if not extension.has_method(class_ref, args.name):
        _emit({"class": class_ref.name, "method": args.name, "found": False})
        return 2
    method = extension.get_method(class_ref, args.name)
    _emit(
        {
            "class": class_ref.name,
            "method": args.name,
            "found": True,
            "declaring_class": method.declaring_class,
            "static": method.is_static,
            "public": method.is_public,
            "parameters": [param.name for param in method.parameters],
            "variadic": method.is_variadic,
            "returns": method.return_type,
        }
    )
    return 0


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modelintel",
        description="Inspect schema-backed record attributes and forwarded methods",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_schema = subparsers.add_parser("schema", help="Print the schema folded from migrations")
    _add_common_args(p_schema)
    p_schema.add_argument("--table", default=None, help="Only print this table")
    p_schema.set_defaults(func=_cmd_schema)

    p_property = subparsers.add_parser("property", help="Describe one record attribute")
    _add_common_args(p_property)
    p_property.add_argument("class_name", help="Dotted record class name")
    p_property.add_argument("name", help="Attribute name")
    p_property.set_defaults(func=_cmd_property)

    p_method = subparsers.add_parser("method", help="Describe one dynamically resolved method")
    _add_common_args(p_method)
    p_method.add_argument("class_name", help="Dotted class name")
    p_method.add_argument("name", help="Method name")
    p_method.set_defaults(func=_cmd_method)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    """
    CLI entrypoint for the modelintel inspection commands.

    Parameters
    ----------
    argv:
        Optional argument list (defaults to sys.argv).

    Returns
    -------
    int
        Exit code (0 on success, 2 when the queried member does not exist).
    """
    parser = _make_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    _setup_logging(args.verbose)

    try:
        func: CommandHandler = args.func
        return int(func(args))
    except ProblemError as exc:
        log_problem(LOG, exc.problem_detail)
        return 1
    except Exception as exc:  # noqa: BLE001
        pd = problem(
            code="cli.failure",
            title="CLI command failed",
            detail=str(exc),
            extras={"command": args.command},
        )
        log_problem(LOG, pd)
        return 1


if __name__ == "__main__":
    sys.exit(main())
