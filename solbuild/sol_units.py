#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from sol_imports import ImportEdge, scan_imports


class UnitOrigin(Enum):
    PROJECT = "project"
    LIBRARY = "library"


@dataclass
class SourceUnit:
    """
    One Solidity source file, addressed by its logical name.

    - raw_content: text as read from disk; the resolved text depends on the
      index it is flattened against and is kept by the Flattener
    """
    logical_name: str
    raw_content: str
    path: Optional[Path] = None
    origin: UnitOrigin = UnitOrigin.PROJECT
    _imports: Optional[List[ImportEdge]] = field(default=None, repr=False, compare=False)

    @property
    def key(self) -> Tuple[str, str]:
        """Identity of the unit; a project and a library unit may share a logical name."""
        return self.origin.value, self.logical_name

    @property
    def directory(self) -> str:
        return posixpath.dirname(self.logical_name)

    @property
    def imports(self) -> List[ImportEdge]:
        if self._imports is None:
            self._imports = scan_imports(self.logical_name, self.raw_content)
        return self._imports


def load_unit(logical_name: str, path: str | Path, origin: UnitOrigin) -> SourceUnit:
    """
    Read a source file into a SourceUnit.

    Raises FileNotFoundError/OSError for unreadable files and UnicodeDecodeError
    for sources that are not UTF-8. A UTF-8 BOM is accepted and dropped.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8-sig")
    return SourceUnit(logical_name=logical_name, raw_content=text, path=path, origin=origin)
