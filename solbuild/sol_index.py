#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from sol_aliases import build_aliases
from sol_units import SourceUnit, UnitOrigin, load_unit


class Tier(Enum):
    PROJECT = "project"
    ALIAS = "alias"
    LIBRARY = "library"


# Lookup order: earlier tiers shadow later ones.
TIER_ORDER = (Tier.PROJECT, Tier.ALIAS, Tier.LIBRARY)


@dataclass(frozen=True)
class Collision:
    """A logical name served by `winner` while `shadowed` also provides it."""
    name: str
    winner: Tier
    shadowed: Tier


class UnitIndex:
    """
    Logical name -> SourceUnit, as a three-tier lookup.

    Tiers, in priority order:
      - project: the project's own units; always win a name collision
      - alias:   suffix aliases of library units (alias key -> library name)
      - library: library units under the name they were discovered with

    The result is the same as merging library, alias and project mappings into
    one dict in that order, but each tier stays inspectable so shadowing can be
    audited via collisions().
    """

    def __init__(
        self,
        project: Mapping[str, SourceUnit] | None = None,
        library: Mapping[str, SourceUnit] | None = None,
        aliases: Mapping[str, str] | None = None,
    ):
        self.project: Dict[str, SourceUnit] = dict(project or {})
        self.library: Dict[str, SourceUnit] = dict(library or {})
        self.aliases: Dict[str, str] = dict(aliases or {})
        for alias, target in self.aliases.items():
            if target not in self.library:
                raise ValueError(f"Alias '{alias}' points to unknown library unit '{target}'")

    # --- Construction ---

    @classmethod
    def from_paths(
        cls,
        project_paths: Mapping[str, Path],
        library_paths: Mapping[str, Path],
    ) -> "UnitIndex":
        """
        Read every located file and build the alias tier from the library paths.
        I/O and decoding errors propagate.
        """
        project = {
            name: load_unit(name, path, UnitOrigin.PROJECT)
            for name, path in project_paths.items()
        }
        library = {
            name: load_unit(name, path, UnitOrigin.LIBRARY)
            for name, path in library_paths.items()
        }
        name_by_path = {path: name for name, path in library_paths.items()}
        aliases = {
            alias: name_by_path[path]
            for alias, path in build_aliases(library_paths).items()
        }
        return cls(project=project, library=library, aliases=aliases)

    @classmethod
    def from_sources(
        cls,
        project: Mapping[str, str] | None = None,
        library: Mapping[str, str] | None = None,
    ) -> "UnitIndex":
        """Build an index from in-memory texts (logical name -> content)."""
        project = project or {}
        library = library or {}
        project_units = {
            name: SourceUnit(name, text, origin=UnitOrigin.PROJECT)
            for name, text in project.items()
        }
        library_units = {
            name: SourceUnit(name, text, origin=UnitOrigin.LIBRARY)
            for name, text in library.items()
        }
        # Names stand in for paths: each library name is its own unique "path".
        aliases = build_aliases({name: name for name in library})
        return cls(project=project_units, library=library_units, aliases=dict(aliases))

    # --- Lookup ---

    def lookup_with_tier(self, name: str) -> Optional[Tuple[SourceUnit, Tier]]:
        if name in self.project:
            return self.project[name], Tier.PROJECT
        if name in self.aliases:
            return self.library[self.aliases[name]], Tier.ALIAS
        if name in self.library:
            return self.library[name], Tier.LIBRARY
        return None

    def lookup(self, name: str) -> Optional[SourceUnit]:
        found = self.lookup_with_tier(name)
        return found[0] if found is not None else None

    def tiers_for(self, name: str) -> List[Tier]:
        """Every tier that provides `name`, in priority order."""
        present = {
            Tier.PROJECT: name in self.project,
            Tier.ALIAS: name in self.aliases,
            Tier.LIBRARY: name in self.library,
        }
        return [tier for tier in TIER_ORDER if present[tier]]

    def collisions(self) -> List[Collision]:
        """Names provided by more than one tier, sorted by name."""
        found: List[Collision] = []
        names = set(self.project) | set(self.aliases) | set(self.library)
        for name in sorted(names):
            tiers = self.tiers_for(name)
            for shadowed in tiers[1:]:
                found.append(Collision(name=name, winner=tiers[0], shadowed=shadowed))
        return found

    def __contains__(self, name: str) -> bool:
        return self.lookup_with_tier(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(set(self.project) | set(self.aliases) | set(self.library)))
