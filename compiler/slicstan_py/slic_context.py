"""
Compilation context for cross-cutting compiler options.

This module defines the CompilationContext dataclass which holds compiler
options that affect multiple stages of compilation (inference, elaboration,
diagnostics, logging).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple


class LogLevel(IntEnum):
    """Hierarchical logging levels for the SlicStan compiler."""
    SILENT = 0      # No logging (default)
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages
    INFO = 10       # General progress messages (-v)
    DEBUG = 30      # Detailed diagnostic information (-vvv)


@dataclass
class CompilationContext:
    """
    Holds cross-cutting compiler options that affect multiple compilation stages.

    Attributes:
        max_inline_depth:       Maximum nesting of inlined calls before elaboration
                                gives up with a non-terminating-elaboration error.
        extra_builtins:         Additional function names accepted as Stan library
                                functions (left in place by elaboration).
        warn_level_promotion:   If True, report function variables whose shared level
                                was raised by some call site.
        log_rich_format:        If True, emit logs in rich format: may include log level, timestamps, etc.
        log_level:              Current logging level.
    """
    max_inline_depth: int = 64
    extra_builtins: Tuple[str, ...] = ()
    warn_level_promotion: bool = True
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @staticmethod
    def default() -> 'CompilationContext':
        """Create a CompilationContext with default settings."""
        return CompilationContext(log_level=LogLevel.WARNING)
