#!/usr/bin/env python3
"""scriptcost/main.py — CLI entry-point for the script cost analyzer.

Usage examples
--------------
    # Memory cost of a script (imports resolved from its directory)
    python -m scriptcost cost hack.js --catalog costs.json

    # Same, for a player in bitnode 4 with source file 4 at level 2
    python -m scriptcost cost hack.js --catalog costs.json \\
        --bitnode 4 --source-file 4=2

    # Reject scripts whose while(true) loops never await
    python -m scriptcost loops hack.js

    # Both checks at once
    python -m scriptcost check hack.js --catalog costs.json

    # Parse a script and print its AST (debugging aid)
    python -m scriptcost parse hack.js --format sexp

Exit codes
----------
    0   Success (script priced, no unsafe loop).
    1   An unsafe loop was found.
    2   Infrastructure failure (missing file, parse error, bad catalog).

The module doubles as ``python -m scriptcost`` via the companion
``scriptcost/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO, Tuple

from scriptcost import __version__
from scriptcost.catalog import load_catalog, player_from_flags
from scriptcost.costs import CostResult
from scriptcost.diagnostics import (
    Diagnostic,
    DiagnosticSeverity,
    error_diagnostic,
    loop_diagnostic,
)
from scriptcost.errors import ScriptCostError
from scriptcost.loops import find_unsafe_loop
from scriptcost.parser import parse
from scriptcost.symbols import calculate_ram_usage

_log = logging.getLogger("scriptcost")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2

SCRIPT_SUFFIXES = (".js", ".script")


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``scriptcost`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("scriptcost")
    for old in list(root.handlers):
        root.removeHandler(old)
    root.setLevel(level)
    root.addHandler(handler)


def _resolve_path(raw: str, label: str = "file") -> Path:
    """Resolve *raw* to an absolute ``Path``, raising on missing files."""
    p = Path(raw).expanduser().resolve()
    if not p.exists():
        _log.error("%s not found: %s", label, p)
        raise SystemExit(EXIT_INFRA)
    return p


def _load_scripts(root: Path) -> Dict[str, str]:
    """Read every script under *root*, keyed by its relative POSIX path."""
    scripts: Dict[str, str] = {}
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix in SCRIPT_SUFFIXES:
            scripts[path.relative_to(root).as_posix()] = path.read_text(encoding="utf-8")
    _log.debug("loaded %d script(s) from %s", len(scripts), root)
    return scripts


def _script_key(script: Path, root: Path) -> str:
    try:
        return script.relative_to(root).as_posix()
    except ValueError:
        _log.error("%s is not inside the scripts directory %s", script, root)
        raise SystemExit(EXIT_INFRA)


def _emit_diagnostics(
    diagnostics: List[Diagnostic],
    fmt: str,
    stream: TextIO,
) -> int:
    """Write *diagnostics* to *stream* in the chosen format.

    Returns the count of ERROR-severity diagnostics.
    """
    error_count = 0
    for diag in diagnostics:
        if diag.severity is DiagnosticSeverity.ERROR:
            error_count += 1
        if fmt == "json":
            stream.write(diag.to_json_str() + "\n")
        else:
            stream.write(diag.to_gcc_format() + "\n")

    if fmt == "summary":
        stream.write(f"--- {len(diagnostics)} diagnostic(s), "
                     f"{error_count} error(s) ---\n")
    return error_count


def _report_failure(error: ScriptCostError) -> int:
    sys.stderr.write(error_diagnostic(error).to_gcc_format() + "\n")
    return EXIT_INFRA


def _format_cost(script: str, result: CostResult) -> str:
    lines = [f"{script}: {result.total:.2f} GB"]
    width = max((len(e.name) for e in result.entries), default=0)
    for entry in result.entries:
        lines.append(f"  {entry.kind.value:<4} {entry.name:<{width}}  {entry.cost:.2f}")
    return "\n".join(lines) + "\n"


# ===========================================================================
# Sub-command implementations
# ===========================================================================

def _compute_cost(args: argparse.Namespace) -> Tuple[str, CostResult]:
    script_path = _resolve_path(args.script, "script")
    root = (_resolve_path(args.scripts_dir, "scripts directory")
            if args.scripts_dir else script_path.parent)
    catalog_path = _resolve_path(args.catalog, "catalog")

    catalog, constants = load_catalog(catalog_path)
    try:
        player = player_from_flags(args.bitnode, args.source_file or ())
    except ValueError as exc:
        _log.error("bad --source-file value: %s", exc)
        raise SystemExit(EXIT_INFRA)

    scripts = _load_scripts(root)
    key = _script_key(script_path, root)
    scripts.setdefault(key, script_path.read_text(encoding="utf-8"))
    result = calculate_ram_usage(player, key, scripts, catalog, constants)
    _log.info("%s: %s GB over %d entr(ies)", key, result.total, len(result.entries))
    return key, result


def _loop_diagnostics(script_path: Path) -> List[Diagnostic]:
    program = parse(script_path.read_text(encoding="utf-8"), str(script_path))
    finding = find_unsafe_loop(program)
    return [loop_diagnostic(finding)] if finding is not None else []


def cmd_cost(args: argparse.Namespace) -> int:
    """Price a script and its imports against a cost catalog."""
    try:
        key, result = _compute_cost(args)
    except ScriptCostError as exc:
        return _report_failure(exc)

    if args.format == "json":
        payload: Dict[str, Any] = {"script": key}
        payload.update(result.to_dict())
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    else:
        sys.stdout.write(_format_cost(key, result))
    return EXIT_OK


def cmd_loops(args: argparse.Namespace) -> int:
    """Report the first while(true) loop that never awaits."""
    script_path = _resolve_path(args.script, "script")
    try:
        diagnostics = _loop_diagnostics(script_path)
    except ScriptCostError as exc:
        return _report_failure(exc)

    error_count = _emit_diagnostics(diagnostics, args.format, sys.stdout)
    return EXIT_ERROR if error_count > 0 else EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    """Run both the loop check and the cost computation."""
    script_path = _resolve_path(args.script, "script")
    try:
        diagnostics = _loop_diagnostics(script_path)
        key, result = _compute_cost(args)
    except ScriptCostError as exc:
        return _report_failure(exc)

    if args.format == "json":
        payload: Dict[str, Any] = {"script": key}
        payload.update(result.to_dict())
        payload["diagnostics"] = [d.to_dict() for d in diagnostics]
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
        error_count = sum(
            1 for d in diagnostics if d.severity is DiagnosticSeverity.ERROR
        )
    else:
        sys.stdout.write(_format_cost(key, result))
        error_count = _emit_diagnostics(diagnostics, "summary", sys.stdout)
    return EXIT_ERROR if error_count > 0 else EXIT_OK


def cmd_parse(args: argparse.Namespace) -> int:
    """Parse a script and pretty-print its AST.

    Useful for debugging the front-end without running any analysis.
    """
    script_path = _resolve_path(args.script, "script")
    try:
        program = parse(script_path.read_text(encoding="utf-8"), str(script_path))
    except ScriptCostError as exc:
        return _report_failure(exc)

    if args.format == "sexp":
        sys.stdout.write(program.to_sexp() + "\n")
    else:
        sys.stdout.write(repr(program) + "\n")
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""

    # --- Top-level parser --------------------------------------------------
    parser = argparse.ArgumentParser(
        prog="scriptcost",
        description=(
            "scriptcost — static memory-cost and loop-safety checks for\n"
            "game scripts."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              scriptcost cost  hack.js --catalog costs.json
              scriptcost loops hack.js
              scriptcost check hack.js --catalog costs.json --bitnode 4
              scriptcost parse hack.js --format sexp
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # Shared argument groups (reusable) ------------------------------------

    def _add_script_arg(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "script",
            metavar="SCRIPT",
            help="Script file (.js or .script).",
        )

    def _add_cost_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--catalog",
            required=True,
            metavar="FILE",
            help="Cost catalog JSON file.",
        )
        p.add_argument(
            "--scripts-dir",
            default=None,
            metavar="DIR",
            help="Directory imports are resolved in (default: the script's).",
        )
        g = p.add_argument_group("player state")
        g.add_argument(
            "--bitnode",
            type=int,
            default=None,
            metavar="N",
            help="Current bitnode (default: 1).",
        )
        g.add_argument(
            "--source-file",
            action="append",
            default=None,
            metavar="N=LEVEL",
            help="Owned source-file level; may be repeated.",
        )

    def _add_format_arg(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "-f", "--format",
            choices=["summary", "json"],
            default="summary",
            help="Output format (default: summary).",
        )

    # --- cost --------------------------------------------------------------
    p_cost = subparsers.add_parser(
        "cost",
        help="Compute a script's memory cost.",
        description=(
            "Collect every capability name a script and its imports "
            "reference and price them against a cost catalog."
        ),
    )
    _add_script_arg(p_cost)
    _add_cost_args(p_cost)
    _add_format_arg(p_cost)
    p_cost.set_defaults(func=cmd_cost)

    # --- loops -------------------------------------------------------------
    p_loops = subparsers.add_parser(
        "loops",
        help="Find while(true) loops that never await.",
        description=(
            "Report the first while(true) loop with no await inside it. "
            "Such a loop never yields and freezes the game."
        ),
    )
    _add_script_arg(p_loops)
    _add_format_arg(p_loops)
    p_loops.set_defaults(func=cmd_loops)

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Run the loop check and the cost computation.",
    )
    _add_script_arg(p_check)
    _add_cost_args(p_check)
    _add_format_arg(p_check)
    p_check.set_defaults(func=cmd_check)

    # --- parse -------------------------------------------------------------
    p_parse = subparsers.add_parser(
        "parse",
        help="Parse a script and dump the AST.",
        description=(
            "Parse a script and pretty-print its abstract syntax tree. "
            "Useful for front-end debugging."
        ),
    )
    _add_script_arg(p_parse)
    p_parse.add_argument(
        "-f", "--format",
        choices=["sexp", "repr"],
        default="sexp",
        help="AST output format (default: sexp).",
    )
    p_parse.set_defaults(func=cmd_parse)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the scriptcost CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # No subcommand given → print help.
    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130  # Standard UNIX convention for SIGINT
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
