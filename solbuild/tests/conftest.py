#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import sys
from pathlib import Path
from textwrap import dedent

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sol_compiler import CompileOutput, artifact_name, contract_name
from sol_context import BuildContext, LogLevel
from sol_diagnostics import Diagnostic


@pytest.fixture
def write_sol_file_to():
    """Write Solidity source to a path relative to some root directory.

    Usage:
        def test_something(write_sol_file_to, tmp_path):
            write_sol_file_to(tmp_path / "contracts", "tokens/Token.sol", '''
                pragma solidity ^0.8.0;
                contract Token {}
            ''')
    """

    def _write(root: Path, rel: str, content: str) -> Path:
        file_path = root / rel
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(dedent(content), encoding="utf-8")
        return file_path

    return _write


@pytest.fixture
def build_context(tmp_path: Path) -> BuildContext:
    """Context rooted in tmp_path: contracts/, node_modules/ and build/."""
    return BuildContext(
        build_path=tmp_path / "build",
        contracts_path=tmp_path / "contracts",
        library_roots=[tmp_path / "node_modules"],
        log_level=LogLevel.SILENT,
    )


class FakeCompiler:
    """
    Stands in for solc: one artifact per source, named after the file, unless
    the source text contains a marker.

    - 'FAIL' anywhere in a source: an error for that source, no artifacts at all
    - 'WARN' anywhere in a source: a warning for that source
    """

    def __init__(self):
        self.calls = []

    def compile(self, sources):
        self.calls.append(dict(sources))
        output = CompileOutput()
        for name, text in sources.items():
            if "FAIL" in text:
                output.errors.append(
                    Diagnostic(
                        kind="error",
                        message="boom",
                        filename=name,
                        formatted=f"{name}: ParserError: boom",
                        # solc counts in bytes
                        offset=len(text[:text.index("FAIL")].encode("utf-8")),
                    )
                )
            if "WARN" in text:
                output.warnings.append(
                    Diagnostic(kind="warning", message="careful", filename=name, formatted=f"{name}: Warning: careful")
                )
        if not output.errors:
            for name in sources:
                output.artifacts[artifact_name(name)] = {
                    "abi": [],
                    "contractName": contract_name(name),
                }
        return output


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()


def has_error_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic contains the given code, e.g. "RES-0010"."""
    if not code.startswith("["):
        code = f"[{code}]"
    return any(code in d.message for d in diagnostics)
