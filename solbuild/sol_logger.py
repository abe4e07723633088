"""
Build output on stderr.

Every message goes through `log`, which drops what the BuildContext's level
does not admit. Stage lines mark the steps of a build (discovery, flattening,
compilation); unit lines are indented under the stage that produced them.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from sol_context import BuildContext, LogLevel

STAGE_MARK = "==>"
UNIT_INDENT = "    "


def log(context: Optional[BuildContext], log_level: LogLevel, message: str) -> None:
    """
    Print `message` to stderr if the context's level admits `log_level`.

    With rich formatting on, lines are prefixed with a timestamp, the tool
    name and the level: "2026-01-02 10:00:00 solb[INFO] ...".
    Without a context (library use outside a build) the message is always
    printed.
    """
    if context is None:
        print(f"solb: {message}", file=sys.stderr)
        return
    if context.log_level < log_level:
        return
    prefix = ""
    if context.log_rich_format and log_level is not LogLevel.SILENT:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        prefix = f"{timestamp} solb[{log_level.name}] "
    print(f"{prefix}{message}", file=sys.stderr)

def log_error(context: Optional[BuildContext], message: str) -> None:
    log(context, LogLevel.ERROR, message)

def log_warning(context: Optional[BuildContext], message: str) -> None:
    log(context, LogLevel.WARNING, message)

def log_info(context: Optional[BuildContext], message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: Optional[BuildContext], message: str) -> None:
    log(context, LogLevel.DEBUG, message)

def log_stage(context: Optional[BuildContext], stage: str, unit: Optional[str] = None) -> None:
    """
    Announce a build stage, or one source unit passing through it.

        ==> Compiling contracts
            Flattening tokens/Token.sol
    """
    if unit:
        log(context, LogLevel.INFO, f"{UNIT_INDENT}{stage} {unit}")
    else:
        log(context, LogLevel.INFO, f"{STAGE_MARK} {stage}")
