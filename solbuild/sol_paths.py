#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

SOURCE_SUFFIX = ".sol"


def locate(root_dir: str | Path) -> Dict[str, Path]:
    """
    Find every Solidity source below root_dir, recursively.

    Returns a mapping logical name -> absolute path, where the logical name is
    the path relative to root_dir with '/' separators (e.g. 'tokens/Token.sol').

    Raises FileNotFoundError if root_dir does not exist, NotADirectoryError if
    it is not a directory.
    """
    root = Path(root_dir)
    if not root.exists():
        raise FileNotFoundError(f"Source directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Source root is not a directory: {root}")

    found: Dict[str, Path] = {}
    for path in sorted(root.rglob(f"*{SOURCE_SUFFIX}")):
        if not path.is_file():
            continue
        found[path.relative_to(root).as_posix()] = path.resolve()
    return found


@dataclass
class SourceRoots:
    """
    Discovery configuration for Solidity sources.

    - project_root: the project's own contracts; every unit there is an entry point
    - library_roots: third-party trees (node_modules and friends)

    When several library roots provide the same logical name, the first root wins.
    """
    project_root: Path = Path("contracts")
    library_roots: List[Path] = field(default_factory=list)

    def add_library_root(self, root: str | Path) -> None:
        self.library_roots.append(Path(root))

    def missing_library_roots(self) -> List[Path]:
        return [root for root in self.library_roots if not root.is_dir()]

    def locate_project(self) -> Dict[str, Path]:
        """Project sources; a missing project root is fatal."""
        return locate(self.project_root)

    def locate_libraries(self) -> Dict[str, Path]:
        """
        Library sources from every existing library root.
        Roots that do not exist are skipped; see missing_library_roots().
        """
        found: Dict[str, Path] = {}
        for root in self.library_roots:
            if not root.is_dir():
                continue
            for name, path in locate(root).items():
                found.setdefault(name, path)
        return found
