#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from typing import Dict, Mapping, Optional

from slic_ast import Stmt, Block, DeclStmt, AssignStmt, SampleStmt
from slic_context import CompilationContext
from slic_diagnostics import CompileError
from slic_elaborator import ElaboratedProgram
from slic_env import TypeEnvironment, TypeEnvResolver
from slic_internal_error import ICELocation, InternalCompilerError
from slic_ir import Bucket, StanIR
from slic_levels import Level, format_level
from slic_logger import log_debug

# (level, assigned anywhere?) -> bucket of the declaration
PLACEMENT: Dict[tuple, Bucket] = {
    (Level.DATA, False): Bucket.DATA,
    (Level.DATA, True): Bucket.TRANSFORMED_DATA,
    (Level.MODEL, False): Bucket.PARAMETERS,
    (Level.MODEL, True): Bucket.TRANSFORMED_PARAMETERS,
    (Level.GENQUANT, False): Bucket.GENERATED_QUANTITIES,
    (Level.GENQUANT, True): Bucket.GENERATED_QUANTITIES,
}

# Buckets whose values come from outside the program; nothing may assign them.
_INPUT_BUCKETS = (Bucket.DATA, Bucket.PARAMETERS)


class BlockTransformer:
    """
    Shreds an elaborated program into Stan blocks.

    Usage:

        ir = BlockTransformer(elaborated, levels).transform()

    `levels` gives the level of every variable declared in the elaborated
    program (see slic_elaborator.thread_levels). The assigned-anywhere flags
    are recomputed on the elaborated program, where inlined parameters are
    bound by their initializers.
    """

    def __init__(
            self,
            elaborated: ElaboratedProgram,
            levels: Mapping[str, Level],
            context: Optional[CompilationContext] = None,
    ) -> None:
        self.elaborated = elaborated
        self.levels = levels
        self.context = context or CompilationContext.default()
        self.ir = StanIR()
        self._homes: Dict[str, Bucket] = {}
        self._env: Optional[TypeEnvironment] = None

    def transform(self) -> StanIR:
        try:
            self._env, _ = TypeEnvResolver(self.elaborated.as_program()).resolve()
        except CompileError as e:
            # Elaboration must never introduce a duplicate declaration.
            raise InternalCompilerError(
                f"[ICE-0030] elaborated program is not well-scoped: {e.diagnostic.message}",
                ICELocation(e.diagnostic.name, None),
            ) from e

        for stmt in self.elaborated.stmts:
            self._place(stmt)
        log_debug(
            self.context,
            "Block sizes: " + ", ".join(f"{b.value}={len(s)}" for b, s in self.ir.blocks()),
        )
        return self.ir

    # --- internal helpers ---

    def _place(self, stmt: Stmt) -> None:
        if isinstance(stmt, Block):
            for inner in stmt.stmts:
                self._place(inner)
            return

        if isinstance(stmt, DeclStmt):
            bucket = self._bucket_for(stmt)
            self._homes[stmt.name] = bucket
            self.ir.append(bucket, stmt)
            return

        if isinstance(stmt, AssignStmt):
            bucket = self._homes.get(stmt.target)
            if bucket is None or bucket in _INPUT_BUCKETS:
                raise InternalCompilerError(
                    f"[ICE-0032] assignment to '{stmt.target}' has no transformed block "
                    f"(declared in {bucket.value if bucket else 'no block'})",
                    ICELocation(stmt.target, stmt.span),
                )
            self.ir.append(bucket, stmt)
            return

        if isinstance(stmt, SampleStmt):
            self.ir.append(Bucket.MODEL, stmt)
            return

        raise InternalCompilerError(
            f"[ICE-0033] unexpected statement {type(stmt).__name__} after elaboration",
            ICELocation(getattr(stmt, "name", None), stmt.span),
        )

    def _bucket_for(self, decl: DeclStmt) -> Bucket:
        level = self.levels.get(decl.name)
        info = self._env.lookup(decl.name)
        bucket = PLACEMENT.get((level, info.assigned if info is not None else None))
        if bucket is None:
            raise InternalCompilerError(
                f"[ICE-0031] no block for '{decl.name}' with level {format_level(level)} "
                f"and assigned={info.assigned if info is not None else None}",
                ICELocation(decl.name, decl.span),
            )
        return bucket
