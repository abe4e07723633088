#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
import os
from pathlib import Path
from typing import Dict, List

from sol_build import BuildReport, build, discover, run_flatten
from sol_context import BuildContext, DEFAULT_BUILD_PATH, DEFAULT_CONTRACTS_PATH, DEFAULT_LIBRARY_PATH, LogLevel
from sol_diagnostics import Diagnostic
from sol_flatten import Flattener
from sol_logger import log_error, log_info, log_warning


def _library_roots_from_env() -> List[str]:
    # Supports multiple paths separated by : (Unix) or ; (Windows)
    env = os.getenv("SOLB_LIBRARY_PATH")
    if not env:
        return []
    separator = ';' if os.name == 'nt' else ':'
    return [p for p in env.split(separator) if p]


def _load_file_lines(path: str, cache: Dict[str, List[str]]) -> List[str]:
    if path not in cache:
        text = Path(path).read_text(encoding="utf-8-sig")
        cache[path] = text.splitlines()
    return cache[path]


def print_diagnostic_with_snippet(diag: Diagnostic, file_cache: Dict[str, List[str]], context: BuildContext = None) -> None:
    emit = log_error if diag.is_error else log_warning
    emit(context, diag.format())

    # Compiler diagnostics already carry their own snippet.
    if diag.formatted is not None or not diag.filename or diag.line is None:
        return

    try:
        lines = _load_file_lines(diag.filename, file_cache)
    except (OSError, UnicodeDecodeError):
        return

    line_idx = diag.line - 1
    if not (0 <= line_idx < len(lines)):
        return

    src_line = lines[line_idx]
    width = max(5, len(str(diag.line)))
    emit(context, f"{diag.line:>{width}} | " + src_line)

    if diag.column is None:
        return

    # Import statements are reported at their first character; underline the rest of the line.
    start_col = max(1, diag.column)
    end_col = len(src_line) + 1
    caret_prefix = " " * width + " | " + " " * (start_col - 1)
    emit(context, caret_prefix + "^" * max(1, end_col - start_col))


def print_report(report: BuildReport, context: BuildContext) -> None:
    file_cache: Dict[str, List[str]] = {}
    errors = report.errors
    warnings = report.warnings

    if report.compiled is not None:
        print(f"Compiled with {len(warnings)} warnings and {len(errors)} errors")

    for diag in errors:
        print_diagnostic_with_snippet(diag, file_cache, context)
    if warnings and context.show_warnings:
        for diag in warnings:
            print_diagnostic_with_snippet(diag, file_cache, context)

    if errors:
        log_error(context, "Exiting because of errors.")


def build_build_context(args: argparse.Namespace) -> BuildContext:
    """Build a BuildContext from command-line arguments."""
    verbosity = getattr(args, 'verbosity', 0)
    if verbosity >= 3:
        log_level = LogLevel.DEBUG
    elif verbosity >= 1:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.WARNING

    library_roots = getattr(args, 'library_root', None) or _library_roots_from_env()
    if not library_roots:
        library_roots = [str(DEFAULT_LIBRARY_PATH)]

    context = BuildContext(
        build_path=Path(getattr(args, 'build_path', None) or DEFAULT_BUILD_PATH),
        contracts_path=Path(getattr(args, 'contracts', None) or DEFAULT_CONTRACTS_PATH),
        library_roots=[Path(p) for p in library_roots],
        show_warnings=getattr(args, 'show_warnings', False),
        solc_version=getattr(args, 'solc_version', None),
        optimizer_enabled=not getattr(args, 'no_optimizer', False),
        optimizer_runs=getattr(args, 'optimizer_runs', 200),
        log_rich_format=getattr(args, 'log', False),
        log_level=log_level,
    )
    roots = ",".join(f"'{p}'" for p in context.library_roots)
    log_info(context, f"Contracts root: '{context.contracts_path}'")
    log_info(context, f"Library root(s): {roots or '<none>'}")
    return context


def cmd_build(args: argparse.Namespace) -> int:
    """Flatten and compile every project contract."""
    context = build_build_context(args)
    report = build(context)
    print_report(report, context)
    if report.exit_code == 0:
        print("Build succeeded")
    return report.exit_code


def cmd_flatten(args: argparse.Namespace) -> int:
    """Flatten every project contract without compiling."""
    context = build_build_context(args)
    report = run_flatten(context)
    print_report(report, context)
    if report.flattened is not None and report.exit_code == 0:
        print(f"Flattened {len(report.flattened_files)} contract(s) into {context.flattened_path}")
    return report.exit_code


def cmd_imports(args: argparse.Namespace) -> int:
    """
    Print the inline order of one entry point, one unit per line, with the
    tier that provided it (and the tiers it shadows).
    """
    context = build_build_context(args)
    try:
        index = discover(context)
    except UnicodeDecodeError as e:
        log_error(context, f"error: [LOC-0020] source is not valid UTF-8: {e}")
        return 1
    except OSError as e:
        log_error(context, f"error: [LOC-0010] {e}")
        return 1

    entry = args.entry
    if entry not in index.project:
        candidate = Path(entry)
        try:
            entry = candidate.relative_to(context.contracts_path).as_posix()
        except ValueError:
            pass
    if entry not in index.project:
        log_error(context, f"error: [LOC-0010] entry '{args.entry}' is not a project source")
        return 1

    flattener = Flattener(index, context)
    result = flattener.flatten([entry])
    for name in result.sources[entry].units:
        tiers = [t.value for t in index.tiers_for(name)]
        shadowed = f", shadows {', '.join(tiers[1:])}" if len(tiers) > 1 else ""
        print(f"{name}  [{tiers[0]}{shadowed}]")

    file_cache: Dict[str, List[str]] = {}
    for diag in result.diagnostics:
        print_diagnostic_with_snippet(diag, file_cache, context)
    return 1 if result.has_errors() else 0


def _add_build_path_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--build-path", "-b",
        default=str(DEFAULT_BUILD_PATH),
        help=f"Build path for built files (default: {DEFAULT_BUILD_PATH})",
    )


def _add_source_root_args(parser: argparse.ArgumentParser, suppress: bool = False) -> None:
    """
    Register -c/--contracts and -L/--library-root. Subcommands register them
    with suppressed defaults, so a value given before the subcommand is kept
    unless the subcommand repeats the flag.
    """
    parser.add_argument(
        "-c", "--contracts",
        default=argparse.SUPPRESS if suppress else str(DEFAULT_CONTRACTS_PATH),
        help=f"Project contracts root (default: {DEFAULT_CONTRACTS_PATH})",
    )
    parser.add_argument(
        "-L", "--library-root",
        action="append",
        default=argparse.SUPPRESS if suppress else [],
        help="Add a library source root (can be passed multiple times; default: $SOLB_LIBRARY_PATH or node_modules)",
    )


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="solb", description="Flatten and compile Solidity contracts")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")
    _add_source_root_args(parser)

    ###########################
    # build command
    ###########################
    p_build = subparsers.add_parser("build", help="Build (flatten and compile) solidity files")
    _add_build_path_arg(p_build)
    _add_source_root_args(p_build, suppress=True)
    p_build.add_argument("--show-warnings", "-w", action="store_true", help="Show warnings")
    p_build.add_argument("--solc-version", help="solc version to use (installed on demand)")
    p_build.add_argument("--optimizer-runs", type=int, default=200, help="Optimizer runs (default: 200)")
    p_build.add_argument("--no-optimizer", action="store_true", help="Disable the solc optimizer")
    p_build.set_defaults(func=cmd_build)

    ###########################
    # flatten command
    ###########################
    p_flatten = subparsers.add_parser("flatten", help="Flatten solidity files without compiling")
    _add_build_path_arg(p_flatten)
    _add_source_root_args(p_flatten, suppress=True)
    p_flatten.set_defaults(func=cmd_flatten)

    ###########################
    # imports command
    ###########################
    p_imports = subparsers.add_parser("imports", help="Show the inline order of one contract", aliases=["deps"])
    p_imports.add_argument("entry", help="Entry contract, e.g. 'tokens/Token.sol'")
    _add_source_root_args(p_imports, suppress=True)
    p_imports.set_defaults(func=cmd_imports)

    args = parser.parse_args(argv)

    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
