#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import re
from dataclasses import dataclass
from typing import List


# Applied to comment- and string-masked text, so ';' inside literals is invisible.
IMPORT_STMT_RE = re.compile(r"\bimport\b[^;]*;")
# Applied to the original statement text.
SPECIFIER_RE = re.compile(r"""(["'])(?P<path>[^"'\n]*)\1""")


@dataclass(frozen=True)
class ImportEdge:
    """
    A declared dependency of one source unit.

    start/end delimit the whole `import ...;` statement in the importer's raw
    text (end exclusive); line/column are 1-based and point at `import`.
    """
    importer: str
    specifier: str
    start: int
    end: int
    line: int
    column: int


def mask_source(text: str) -> str:
    """
    Blank out comments and string literal contents, keeping offsets and newlines.

    Quotes are kept so literals stay recognisable as such.
    """
    out = list(text)
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        nxt = text[i + 1] if i + 1 < n else ""
        if c == "/" and nxt == "/":
            while i < n and text[i] != "\n":
                out[i] = " "
                i += 1
        elif c == "/" and nxt == "*":
            out[i] = out[i + 1] = " "
            i += 2
            while i < n and not (text[i] == "*" and i + 1 < n and text[i + 1] == "/"):
                if text[i] != "\n":
                    out[i] = " "
                i += 1
            if i < n:
                out[i] = out[i + 1] = " "
                i += 2
        elif c in "\"'":
            quote = c
            i += 1
            while i < n and text[i] != quote and text[i] != "\n":
                if text[i] == "\\" and i + 1 < n:
                    out[i] = " "
                    i += 1
                out[i] = " "
                i += 1
            i += 1
        else:
            i += 1
    return "".join(out)


def scan_imports(unit_name: str, text: str) -> List[ImportEdge]:
    """
    Extract every import statement of a Solidity source, in textual order.

    All statement forms are recognised, the path being the first string literal:

        import "a.sol";
        import "a.sol" as A;
        import * as A from "a.sol";
        import {X, Y as Z} from "a.sol";

    Statements inside comments or string literals are ignored, as are
    statements without a path literal.
    """
    edges: List[ImportEdge] = []
    masked = mask_source(text)
    for match in IMPORT_STMT_RE.finditer(masked):
        start, end = match.span()
        spec = SPECIFIER_RE.search(text, start, end)
        if spec is None:
            continue
        line = text.count("\n", 0, start) + 1
        column = start - (text.rfind("\n", 0, start) + 1) + 1
        edges.append(
            ImportEdge(
                importer=unit_name,
                specifier=spec.group("path"),
                start=start,
                end=end,
                line=line,
                column=column,
            )
        )
    return edges
