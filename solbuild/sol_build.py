#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from sol_compiler import CompileOutput, SolcCompiler
from sol_context import BuildContext
from sol_diagnostics import Diagnostic
from sol_flatten import FlattenResult, Flattener
from sol_index import UnitIndex
from sol_logger import log_debug, log_info, log_stage, log_warning
from sol_paths import SourceRoots


@dataclass
class BuildReport:
    """
    Outcome of one build (or flatten-only) invocation.

    index is None when discovery failed; diagnostics then holds the fatal error.
    """
    index: Optional[UnitIndex] = None
    flattened: Optional[FlattenResult] = None
    compiled: Optional[CompileOutput] = None
    flattened_files: List[Path] = field(default_factory=list)
    artifact_files: List[Path] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        found = [d for d in self.diagnostics if d.kind == "error"]
        if self.flattened is not None:
            found.extend(d for d in self.flattened.diagnostics if d.kind == "error")
        if self.compiled is not None:
            found.extend(self.compiled.errors)
        return found

    @property
    def warnings(self) -> List[Diagnostic]:
        found = [d for d in self.diagnostics if d.kind == "warning"]
        if self.flattened is not None:
            found.extend(d for d in self.flattened.diagnostics if d.kind == "warning")
        if self.compiled is not None:
            found.extend(self.compiled.warnings)
        return found

    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def exit_code(self) -> int:
        return 1 if self.has_errors() else 0


def source_roots(context: BuildContext) -> SourceRoots:
    roots = SourceRoots(project_root=Path(context.contracts_path))
    for root in context.library_roots:
        roots.add_library_root(root)
    return roots


def discover(context: BuildContext) -> UnitIndex:
    """
    Locate project and library sources and load them into a UnitIndex.

    Raises FileNotFoundError if the project root is missing, OSError for
    unreadable files and UnicodeDecodeError for non-UTF-8 sources.
    """
    roots = source_roots(context)
    for missing in roots.missing_library_roots():
        log_warning(context, f"Library root '{missing}' not found, skipping")

    log_stage(context, "Discovering sources")
    contracts = roots.locate_project()
    libraries = roots.locate_libraries()
    log_info(context, f"Found {len(contracts)} sources, and {len(libraries)} possible libraries")

    index = UnitIndex.from_paths(contracts, libraries)
    log_debug(context, f"Index holds {len(index.aliases)} library alias(es)")
    for collision in index.collisions():
        log_debug(
            context,
            f"'{collision.name}': {collision.winner.value} shadows {collision.shadowed.value}",
        )
    return index


def write_flattened(sources: Mapping[str, str], out_dir: Path) -> List[Path]:
    """Write each flattened source to out_dir/<logical name>, creating parents."""
    written = []
    for name, content in sources.items():
        target = out_dir / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        written.append(target)
    return written


def write_artifacts(artifacts: Mapping[str, Dict[str, Any]], out_dir: Path) -> List[Path]:
    """Write each artifact to out_dir/<name>.json, creating parents."""
    written = []
    for name, artifact in artifacts.items():
        target = out_dir / f"{name}.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(artifact, indent=2) + "\n", encoding="utf-8")
        written.append(target)
    return written


def attribute(diagnostics: List[Diagnostic], flattened: FlattenResult) -> None:
    """
    Point compiler diagnostics at the unit and line they came from, using the
    flattened sources' line maps.

    solc reports source locations as byte offsets into the UTF-8 text.
    """
    for diag in diagnostics:
        if diag.offset is None or diag.filename not in flattened.sources:
            continue
        source = flattened.sources[diag.filename]
        line = source.content.encode("utf-8")[:max(0, diag.offset)].count(b"\n") + 1
        origin = source.origin(line)
        if origin is not None:
            diag.unit_name, diag.line = origin


def _fatal(report: BuildReport, code: str, error: Exception) -> BuildReport:
    report.diagnostics.append(Diagnostic(kind="error", message=f"[{code}] {error}"))
    return report


def run_flatten(context: BuildContext) -> BuildReport:
    """
    Discover, flatten every project unit and write the flattened tree.
    Flattened output is written even when flattening reported errors.
    """
    report = BuildReport()
    try:
        report.index = discover(context)
    except UnicodeDecodeError as e:
        return _fatal(report, "LOC-0020", ValueError(f"source is not valid UTF-8: {e}"))
    except OSError as e:
        return _fatal(report, "LOC-0010", e)

    log_stage(context, "Flattening contracts")
    flattener = Flattener(report.index, context)
    report.flattened = flattener.flatten(report.index.project.keys())

    try:
        report.flattened_files = write_flattened(report.flattened.contents(), context.flattened_path)
    except OSError as e:
        return _fatal(report, "LOC-0030", e)
    log_info(context, f"Wrote {len(report.flattened_files)} flattened source(s) to {context.flattened_path}")
    return report


def build(context: BuildContext, compiler=None) -> BuildReport:
    """
    Full build:

      1. discover and flatten (see run_flatten); flattened files are written
      2. compile the flattened sources
      3. write artifacts for the units that compiled, once all diagnostics are in

    `compiler` is anything with compile(sources) -> CompileOutput; defaults to solc.
    """
    log_info(context, "Starting build...")
    report = run_flatten(context)
    if report.flattened is None or report.diagnostics:
        return report

    log_stage(context, "Compiling contracts")
    compiler = compiler or SolcCompiler(context)
    report.compiled = compiler.compile(report.flattened.contents())
    attribute(report.compiled.errors + report.compiled.warnings, report.flattened)

    try:
        report.artifact_files = write_artifacts(report.compiled.artifacts, context.compiled_path)
    except OSError as e:
        return _fatal(report, "LOC-0030", e)
    log_info(context, f"Wrote {len(report.artifact_files)} artifact(s) to {context.compiled_path}")
    return report
