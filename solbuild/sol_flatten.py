#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import bisect
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from sol_context import BuildContext
from sol_diagnostics import Diagnostic
from sol_imports import ImportEdge
from sol_index import UnitIndex
from sol_logger import log_debug, log_info, log_stage
from sol_units import SourceUnit

UnitKey = Tuple[str, str]

FILE_HEADER = "// File: {name}"


class UnitState(Enum):
    UNVISITED = "unvisited"
    VISITING = "visiting"
    FLATTENED = "flattened"


@dataclass
class FlattenedSource:
    """
    The self-contained text of one entry point.

    - units: logical names in inline order (dependencies first, entry last)
    - spans: (first line, line count) of each unit's body in `content`,
      parallel to `units`
    """
    entry: str
    content: str
    units: List[str] = field(default_factory=list)
    spans: List[Tuple[int, int]] = field(default_factory=list)

    def origin(self, line: int) -> Optional[Tuple[str, int]]:
        """
        Map a 1-based line of `content` back to (unit name, line in that unit).
        Header and separator lines map to None.
        """
        starts = [start for start, _ in self.spans]
        i = bisect.bisect_right(starts, line) - 1
        if i < 0:
            return None
        start, count = self.spans[i]
        if line >= start + count:
            return None
        return self.units[i], line - start + 1


@dataclass
class FlattenResult:
    sources: Dict[str, FlattenedSource] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def contents(self) -> Dict[str, str]:
        return {name: src.content for name, src in self.sources.items()}

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)


def is_relative(specifier: str) -> bool:
    return specifier.startswith("./") or specifier.startswith("../")


def strip_relative(specifier: str) -> str:
    """'../../math/Util.sol' -> 'math/Util.sol'"""
    parts = [p for p in specifier.split("/") if p not in (".", "..", "")]
    return "/".join(parts)


def comment_out(statement: str) -> str:
    """Turn an inlined import statement into a comment spanning the same lines."""
    return "/* " + statement.replace("*/", "* /") + " */"


class Flattener:
    """
    Inlines the transitive imports of entry points in dependency order.

    - Every import specifier is resolved once per (importer, specifier) edge:
        1. exact logical name
        2. relative to the importer's directory ('./', '../'), normalized
        3. suffix alias of the specifier with its relative segments dropped
    - Each unit is inlined once per entry point, after all of its dependencies.
    - Resolution failures and cycles are collected as diagnostics; flattening
      always carries on with the rest of the graph.

    Resolution is global: all entry points see the same index. Each entry point
    is walked with fresh state, so nothing half-visited leaks between them.
    """

    def __init__(self, index: UnitIndex, context: BuildContext | None = None):
        self.index = index
        self.context = context or BuildContext.default()
        self.diagnostics: List[Diagnostic] = []
        self._resolutions: Dict[Tuple[UnitKey, str], Optional[SourceUnit]] = {}
        self._reported_cycles: Set[FrozenSet[UnitKey]] = set()
        self._resolved: Dict[UnitKey, str] = {}

    # --- Public API ---

    def flatten(self, entry_points: Iterable[str]) -> FlattenResult:
        result = FlattenResult()
        for name in sorted(set(entry_points)):
            entry = self.index.lookup(name)
            if entry is None:
                raise ValueError(f"Unknown entry point '{name}'")
            log_stage(self.context, "Flattening", name)
            result.sources[name] = self._flatten_entry(entry)
        result.diagnostics = list(self.diagnostics)
        log_info(
            self.context,
            f"Flattened {len(result.sources)} entry point(s) with {len(result.diagnostics)} diagnostic(s)",
        )
        return result

    def resolve(self, importer: SourceUnit, edge: ImportEdge) -> Optional[SourceUnit]:
        """
        Resolve one import edge, memoized. The first failed attempt for an edge
        records a [RES-0010] diagnostic; later attempts stay silent.
        """
        memo_key = (importer.key, edge.specifier)
        if memo_key in self._resolutions:
            return self._resolutions[memo_key]

        target = self._resolve_specifier(importer, edge.specifier)
        self._resolutions[memo_key] = target
        if target is None:
            self.diagnostics.append(
                Diagnostic(
                    kind="error",
                    message=f"[RES-0010] cannot resolve import '{edge.specifier}'",
                    unit_name=importer.logical_name,
                    filename=str(importer.path) if importer.path is not None else None,
                    line=edge.line,
                    column=edge.column,
                )
            )
        else:
            log_debug(
                self.context,
                f"Resolved '{edge.specifier}' in '{importer.logical_name}' to '{target.logical_name}'",
            )
        return target

    # --- Internal helpers ---

    def _resolve_specifier(self, importer: SourceUnit, specifier: str) -> Optional[SourceUnit]:
        # 1. exact
        unit = self.index.lookup(specifier)
        if unit is not None:
            return unit

        # 2. relative to the importing unit
        if is_relative(specifier):
            joined = posixpath.normpath(posixpath.join(importer.directory, specifier))
            if not joined.startswith("../"):
                unit = self.index.lookup(joined)
                if unit is not None:
                    return unit

        # 3. suffix alias
        stripped = strip_relative(specifier)
        if stripped and stripped != specifier:
            return self.index.lookup(stripped)
        return None

    def _flatten_entry(self, entry: SourceUnit) -> FlattenedSource:
        state: Dict[UnitKey, UnitState] = {entry.key: UnitState.VISITING}
        order: List[SourceUnit] = []
        # Explicit work stack: (unit, its remaining import edges). The stack is
        # also the current path, i.e. exactly the VISITING units.
        stack: List[Tuple[SourceUnit, Iterator[ImportEdge]]] = [(entry, iter(entry.imports))]

        while stack:
            unit, edges = stack[-1]
            edge = next(edges, None)
            if edge is None:
                stack.pop()
                state[unit.key] = UnitState.FLATTENED
                order.append(unit)
                continue

            target = self.resolve(unit, edge)
            if target is None:
                continue

            current = state.get(target.key, UnitState.UNVISITED)
            if current is UnitState.FLATTENED:
                continue
            if current is UnitState.VISITING:
                path = [u for u, _ in stack]
                start = next(i for i, u in enumerate(path) if u.key == target.key)
                self._report_cycle(path[start:], edge)
                continue

            state[target.key] = UnitState.VISITING
            stack.append((target, iter(target.imports)))

        return self._render(entry, order)

    def _report_cycle(self, members: List[SourceUnit], edge: ImportEdge) -> None:
        cycle_key = frozenset(u.key for u in members)
        if cycle_key in self._reported_cycles:
            return
        self._reported_cycles.add(cycle_key)

        chain = " -> ".join(u.logical_name for u in members + members[:1])
        closing = members[-1]
        self.diagnostics.append(
            Diagnostic(
                kind="error",
                message=f"[FLT-0010] import cycle detected: {chain}",
                unit_name=closing.logical_name,
                filename=str(closing.path) if closing.path is not None else None,
                line=edge.line,
                column=edge.column,
            )
        )

    def resolved_text(self, unit: SourceUnit) -> str:
        """
        Raw text with every import that resolves against this flattener's index
        commented out. Computed once per unit; the unit itself is left untouched,
        so the same units can be flattened against another index.
        """
        if unit.key in self._resolved:
            return self._resolved[unit.key]

        text = unit.raw_content
        pieces: List[str] = []
        cursor = 0
        for edge in unit.imports:
            if self.resolve(unit, edge) is None:
                # Left in place so the compiler reports it too.
                continue
            pieces.append(text[cursor:edge.start])
            pieces.append(comment_out(text[edge.start:edge.end]))
            cursor = edge.end
        pieces.append(text[cursor:])

        self._resolved[unit.key] = "".join(pieces)
        return self._resolved[unit.key]

    def _render(self, entry: SourceUnit, order: List[SourceUnit]) -> FlattenedSource:
        flattened = FlattenedSource(entry=entry.logical_name, content="")
        parts: List[str] = []
        line = 1
        for unit in order:
            body = self.resolved_text(unit)
            if not body.endswith("\n"):
                body += "\n"
            body_lines = body.count("\n")

            flattened.units.append(unit.logical_name)
            flattened.spans.append((line + 2, body_lines))
            parts.append(FILE_HEADER.format(name=unit.logical_name) + "\n\n" + body)
            # header, blank line, body, then the blank separator line
            line += 2 + body_lines + 1

        flattened.content = "\n".join(parts)
        log_debug(
            self.context,
            f"'{entry.logical_name}' inlines {len(order)} unit(s): {', '.join(flattened.units)}",
        )
        return flattened


def flatten(
    units: UnitIndex | Mapping[str, SourceUnit],
    entry_points: Iterable[str],
    context: BuildContext | None = None,
) -> FlattenResult:
    """
    Flatten entry_points against `units`.

    A plain mapping is treated as a single tier of project units.
    """
    index = units if isinstance(units, UnitIndex) else UnitIndex(project=units)
    return Flattener(index, context).flatten(entry_points)
