#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from pathlib import Path
from typing import Dict, List, Mapping


def segment_count(logical_name: str) -> int:
    return len(logical_name.split("/"))


def path_suffixes(logical_name: str) -> List[str]:
    """
    Proper suffixes of a logical name, longest first.

        'a/b/C.sol' -> ['b/C.sol', 'C.sol']
    """
    parts = logical_name.split("/")
    return ["/".join(parts[i:]) for i in range(1, len(parts))]


def build_aliases(library_units: Mapping[str, Path]) -> Dict[str, Path]:
    """
    Make library files reachable by every suffix of their logical name.

    Third-party sources import their siblings relative to where they sit inside
    their own package, which does not match the name they were discovered under
    (e.g. 'vendor/openzeppelin/math/Safe.sol' importing './Util.sol'). Every
    suffix of a library name is registered as an extra key for the same path:

      1. names are processed deepest first (segment count descending, ties by name);
      2. the first name to claim a suffix keeps it, so the deepest path wins;
      3. a suffix that is itself an original library name is left to that original.

    Top-level library files contribute nothing.
    """
    ordered = sorted(library_units, key=lambda name: (-segment_count(name), name))

    aliases: Dict[str, Path] = {}
    for name in ordered:
        for suffix in path_suffixes(name):
            if suffix in aliases or suffix in library_units:
                continue
            aliases[suffix] = library_units[name]
    return aliases
