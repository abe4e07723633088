"""
Build context for cross-cutting build options.

This module defines the BuildContext dataclass which holds options that affect
several build stages (discovery, flattening, compilation, reporting).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import List, Optional


DEFAULT_BUILD_PATH = Path("build")
DEFAULT_CONTRACTS_PATH = Path("contracts")
DEFAULT_LIBRARY_PATH = Path("node_modules")

FLATTENED_FOLDER = "flattened"
COMPILED_FOLDER = "compiled"


class LogLevel(IntEnum):
    """Hierarchical logging levels for the build tool."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages
    INFO = 10       # General progress messages (-v)
    DEBUG = 30      # Detailed diagnostic information (-vvv)


@dataclass
class BuildContext:
    """
    Holds cross-cutting build options.

    Attributes:
        build_path:         Root of the output tree (flattened/ and compiled/ live below it).
        contracts_path:     Root of the project sources; every unit found there is an entry point.
        library_roots:      Roots of third-party sources, searched for importable units.
        show_warnings:      If True, print compiler warnings (they are always counted).
        solc_version:       Compiler version to use; None means the active solcx version.
        optimizer_enabled:  Whether the solc optimizer runs.
        optimizer_runs:     Optimizer runs setting.
        log_rich_format:    If True, emit logs in rich format: may include log level, timestamps, etc.
        log_level:          Current logging level.
    """
    build_path: Path = DEFAULT_BUILD_PATH
    contracts_path: Path = DEFAULT_CONTRACTS_PATH
    library_roots: List[Path] = field(default_factory=lambda: [DEFAULT_LIBRARY_PATH])
    show_warnings: bool = False
    solc_version: Optional[str] = None
    optimizer_enabled: bool = True
    optimizer_runs: int = 200
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @property
    def flattened_path(self) -> Path:
        return Path(self.build_path) / FLATTENED_FOLDER

    @property
    def compiled_path(self) -> Path:
        return Path(self.build_path) / COMPILED_FOLDER

    @staticmethod
    def default() -> 'BuildContext':
        """Create a BuildContext with default settings."""
        return BuildContext(log_level=LogLevel.WARNING)
