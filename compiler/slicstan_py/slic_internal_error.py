#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

# slic_internal_error.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from slic_ast import Span

_LEADING_ICE_CODE = re.compile(r"\[(ICE-\d{4})\]\s*")


@dataclass(frozen=True)
class ICELocation:
    # Variable, level node or function the broken invariant is about
    name: Optional[str]
    span: Optional[Span] = None


class InternalCompilerError(RuntimeError):
    """
    A pipeline invariant broke: a compiler bug, never a user mistake.

    Messages start with their `[ICE-xxxx]` code; uncoded messages report as
    ICE-9999. User errors travel as CompileError and end up as Diagnostics.
    """

    def __init__(self, message: str, loc: ICELocation | None = None):
        super().__init__(message)
        self.message = message
        self.loc = loc

    @property
    def code(self) -> str:
        m = _LEADING_ICE_CODE.match(self.message)
        return m.group(1) if m else "ICE-9999"

    def format(self) -> str:
        m = _LEADING_ICE_CODE.match(self.message)
        text = self.message[m.end():] if m else self.message
        where = ""
        subject = ""
        if self.loc is not None:
            if self.loc.span is not None:
                where = f"{self.loc.span.start_line}:{self.loc.span.start_column}: "
            if self.loc.name:
                subject = f" at '{self.loc.name}'"
        return f"{where}internal compiler error [{self.code}]{subject}: {text}"
