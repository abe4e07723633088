#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import json
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, List, Mapping, Optional

import solcx
from solcx.exceptions import (
    DownloadError,
    SolcError,
    SolcInstallationError,
    SolcNotInstalled,
    UnexpectedVersionError,
)

from sol_context import BuildContext
from sol_diagnostics import Diagnostic
from sol_logger import log_debug, log_info
from sol_paths import SOURCE_SUFFIX

OUTPUT_SELECTION = ["abi", "evm.bytecode", "evm.deployedBytecode", "metadata"]


@dataclass
class CompileOutput:
    """
    What a compiler hands back for one batch of sources.

    - artifacts: artifact name -> compiled contract (solc standard-JSON shape)
    - errors / warnings: diagnostics; each carries solc's formatted message
    """
    artifacts: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)


def artifact_name(source_name: str) -> str:
    """'tokens/Token.sol' -> 'tokens/Token'"""
    if source_name.endswith(SOURCE_SUFFIX):
        return source_name[: -len(SOURCE_SUFFIX)]
    return source_name


def contract_name(source_name: str) -> str:
    """The contract an artifact is taken from: the one named after its file."""
    return PurePosixPath(source_name).stem


class SolcCompiler:
    """
    Compiles flattened sources with solc through py-solc-x's standard-JSON API.

    solc failures are turned into diagnostics: compile errors never raise.
    """

    def __init__(self, context: BuildContext | None = None, install: bool = True):
        self.context = context or BuildContext.default()
        self.install = install

    def standard_input(self, sources: Mapping[str, str]) -> Dict[str, Any]:
        return {
            "language": "Solidity",
            "sources": {name: {"content": text} for name, text in sources.items()},
            "settings": {
                "optimizer": {
                    "enabled": self.context.optimizer_enabled,
                    "runs": self.context.optimizer_runs,
                },
                "outputSelection": {"*": {"*": list(OUTPUT_SELECTION)}},
            },
        }

    def ensure_installed(self) -> None:
        version = self.context.solc_version
        if version is None or not self.install:
            return
        installed = {str(v) for v in solcx.get_installed_solc_versions()}
        if version.lstrip("v") not in installed:
            log_info(self.context, f"Installing solc {version}")
            solcx.install_solc(version)

    def compile(self, sources: Mapping[str, str]) -> CompileOutput:
        if not sources:
            return CompileOutput()

        kwargs = {}
        if self.context.solc_version is not None:
            kwargs["solc_version"] = self.context.solc_version

        try:
            self.ensure_installed()
        except (SolcInstallationError, DownloadError, UnexpectedVersionError, ValueError, OSError) as e:
            # Network failures surface as ConnectionError, bad versions as ValueError.
            return CompileOutput(errors=[_invocation_error(f"cannot install solc {self.context.solc_version}: {e}")])

        try:
            log_debug(self.context, f"Invoking solc on {len(sources)} source(s)")
            output = solcx.compile_standard(self.standard_input(sources), **kwargs)
        except SolcError as e:
            # solc reported errors; its JSON output still carries the full list.
            output = _parse_stdout(e.stdout_data)
            if output is None:
                return CompileOutput(errors=[_invocation_error(e.message)])
        except SolcNotInstalled as e:
            return CompileOutput(errors=[_invocation_error(str(e))])

        return self.collect(output, sources)

    def collect(self, output: Mapping[str, Any], sources: Mapping[str, str]) -> CompileOutput:
        """Split solc standard-JSON output into artifacts and diagnostics."""
        result = CompileOutput()
        for entry in output.get("errors", []):
            diag = _diagnostic_from_solc(entry)
            if diag.kind == "error":
                result.errors.append(diag)
            elif diag.kind == "warning":
                result.warnings.append(diag)

        compiled = output.get("contracts", {})
        for source_name in sources:
            contract = compiled.get(source_name, {}).get(contract_name(source_name))
            if contract is not None:
                result.artifacts[artifact_name(source_name)] = contract
            elif not result.errors:
                message = (
                    f"[SOL-0020] no contract named '{contract_name(source_name)}' "
                    f"in '{source_name}'; no artifact written"
                )
                log_debug(self.context, message)
                result.warnings.append(
                    Diagnostic(kind="warning", message=message, unit_name=source_name)
                )
        return result


def _parse_stdout(stdout_data: Any) -> Optional[Dict[str, Any]]:
    if not stdout_data:
        return None
    try:
        parsed = json.loads(stdout_data)
    except (TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _invocation_error(message: str) -> Diagnostic:
    return Diagnostic(kind="error", message=f"[SOL-0010] solc failed: {message.strip()}")


def _diagnostic_from_solc(entry: Mapping[str, Any]) -> Diagnostic:
    location = entry.get("sourceLocation") or {}
    severity = entry.get("severity", "error")
    return Diagnostic(
        kind=severity if severity in ("error", "warning") else "info",
        message=entry.get("message", ""),
        filename=location.get("file"),
        formatted=entry.get("formattedMessage") or entry.get("message", ""),
        offset=location.get("start"),
    )
