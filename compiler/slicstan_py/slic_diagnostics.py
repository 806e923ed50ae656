#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from slic_ast import Node


class ErrorKind(Enum):
    UNDEFINED_VARIABLE = "UndefinedVariable"
    UNDEFINED_FUNCTION = "UndefinedFunction"
    ARITY_MISMATCH = "ArityMismatch"
    REDECLARATION = "Redeclaration"
    NESTED_FUNCTION_DEFINITION = "NestedFunctionDefinition"
    INCONSISTENT_LEVEL_CONSTRAINTS = "InconsistentLevelConstraints"
    NON_TERMINATING_ELABORATION = "NonTerminatingElaboration"
    LEVEL_PROMOTION = "LevelPromotion"


DIAGNOSTIC_CODE_FAMILIES = {
    "LVL": [
        "LVL-0010",  # undefined variable
        "LVL-0020",  # undefined function
        "LVL-0030",  # arity mismatch
        "LVL-0040",  # redeclared variable, parameter or function
        "LVL-0050",  # inconsistent level constraints
        "LVL-0060",  # function definition among statements
        "LVL-0100",  # function variable promoted by a call site (warning)
    ],
    "ELB": [
        "ELB-0010",  # recursive call graph
        "ELB-0020",  # inline depth limit exceeded
    ],
    # ICE codes are internal compiler errors raised as exceptions,
    # not user-facing diagnostics; they are excluded from this registry.
}

_CODE_RE = re.compile(r"\[([A-Z]{3}-\d{4})\]")


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str
    error_kind: Optional[ErrorKind] = None

    # Offending variable, function or call-site name
    name: Optional[str] = None

    # Structured payload: conflicting bounds, call chain, arities, ...
    details: Dict[str, Any] = field(default_factory=dict)

    # Primary location (start of the span)
    line: Optional[int] = None
    column: Optional[int] = None

    # Optional end of span (exclusive)
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    @property
    def code(self) -> Optional[str]:
        m = _CODE_RE.search(self.message)
        return m.group(1) if m else None

    # Return the one-line header; the front end decides how to show the rest
    def format(self) -> str:
        loc = ""
        if self.line is not None:
            loc += f"{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
        if loc:
            loc += ": "
        return f"{loc}{self.kind}: {self.message}"


def diag_from_node(
        kind: str,
        message: str,
        *,
        node: Optional[Node],
        error_kind: Optional[ErrorKind] = None,
        name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
) -> Diagnostic:
    line = column = end_line = end_column = None
    if node is not None and node.span is not None:
        s = node.span
        line = s.start_line
        column = s.start_column
        end_line = s.end_line
        end_column = s.end_column
    return Diagnostic(
        kind=kind,
        message=message,
        error_kind=error_kind,
        name=name,
        details=dict(details or {}),
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
    )


class CompileError(Exception):
    """
    Raised by a compiler stage on the first user error it finds.

    Carries exactly one Diagnostic; the driver turns it into a failed
    CompileResult and skips the remaining stages.
    """

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.diagnostic.error_kind


def raise_error(
        error_kind: ErrorKind,
        message: str,
        *,
        node: Optional[Node],
        name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
) -> None:
    raise CompileError(
        diag_from_node(
            "error",
            message,
            node=node,
            error_kind=error_kind,
            name=name,
            details=details,
        )
    )
