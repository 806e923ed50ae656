#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from slic_ast import Program
from slic_context import CompilationContext
from slic_diagnostics import Diagnostic, ErrorKind
from slic_elaborator import ElaboratedProgram
from slic_ir import StanIR
from slic_level_types import LevelTypes
from slic_levels import Level


@dataclass
class CompileResult:
    """
    Everything one compilation produced.

    Contains:
      - the input program and the compilation context
      - level types (per level node) and function signatures
      - the elaborated program and the level of each of its variables
      - the block-structured IR
      - diagnostics: warnings, plus at most one error

    On error, the products of the failing stage and of every later stage are
    None.
    """
    program: Program
    context: CompilationContext = field(default_factory=CompilationContext.default)

    level_types: Optional[LevelTypes] = None
    elaborated: Optional[ElaboratedProgram] = None
    levels: Dict[str, Level] = field(default_factory=dict)
    ir: Optional[StanIR] = None

    diagnostics: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)

    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.diagnostics)

    @property
    def error(self) -> Optional[Diagnostic]:
        for d in self.diagnostics:
            if d.kind == "error":
                return d
        return None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        err = self.error
        return err.error_kind if err is not None else None
