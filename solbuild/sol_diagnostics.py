#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from typing import Optional


DIAGNOSTIC_CODE_FAMILIES = {
    "LOC": [
        "LOC-0010",  # source root or file missing/unreadable
        "LOC-0020",  # source file is not valid UTF-8
        "LOC-0030",  # output could not be written
    ],
    "RES": [
        "RES-0010",
    ],
    "FLT": [
        "FLT-0010",
    ],
    # Compiler diagnostics proper carry solc's own formatted message and no code.
    "SOL": [
        "SOL-0010",  # compiler could not be run or produced unreadable output
        "SOL-0020",  # no contract named after the source unit
    ],
}


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str
    unit_name: Optional[str] = None  # logical name of the source unit
    filename: Optional[str] = None  # file path

    # Primary location (start of the span)
    line: Optional[int] = None
    column: Optional[int] = None

    # Pre-rendered text supplied by the compiler (solc's formattedMessage)
    formatted: Optional[str] = None
    # UTF-8 byte offset into the compiled (flattened) source, when known
    offset: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.kind == "error"

    # Return the one-line header; compiler diagnostics keep their own rendering
    def format(self) -> str:
        if self.formatted is not None:
            text = self.formatted.rstrip()
            if self.unit_name is not None and self.line is not None:
                text += f"\n  --> in {self.unit_name}:{self.line}"
            return text
        loc = ""
        if self.filename is not None:
            loc += f"{os.path.abspath(str(self.filename))}"
        if self.line is not None:
            loc += f":{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
        if self.unit_name is not None:
            loc += f"({self.unit_name})"
        if loc:
            loc += ": "
        return f"{loc}{self.kind}: {self.message}"
