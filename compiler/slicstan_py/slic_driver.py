#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from slic_analysis import CompileResult
from slic_ast import Program
from slic_ast_printer import format_program
from slic_blocks import BlockTransformer
from slic_callgraph import CallGraph
from slic_context import CompilationContext
from slic_diagnostics import CompileError
from slic_elaborator import Elaborator, find_level_promotions, solve_elaborated, thread_levels
from slic_ir import format_ir
from slic_level_types import LevelTypeChecker
from slic_logger import log_info, log_debug, log_error, log_stage, log_warning
from slic_names import NameAllocator, program_names


class SlicDriver:
    """
    Compiler core pipeline:

      1. infer level types (functions shared across call sites)
      2. check that the call graph can be unrolled
      3. elaborate (inline every user-defined call)
      4. thread levels onto the inlined names, warning where a shared
         function level promotes some call site
      5. shred into Stan blocks

    Each stage either succeeds or raises a CompileError; the first error
    ends the compilation. A driver holds no state between compile() calls.
    """

    def __init__(self, context: CompilationContext | None = None):
        self.context = context or CompilationContext.default()

    # --- Public API ---

    def compile(self, program: Program) -> CompileResult:
        result = CompileResult(program=program, context=self.context)
        log_info(
            self.context,
            f"Compiling program with {len(program.funcs)} function(s) and {len(program.stmts)} statement(s)",
        )
        log_debug(self.context, format_program(program))

        try:
            self._run(program, result)
        except CompileError as e:
            result.diagnostics.append(e.diagnostic)
            log_error(self.context, e.diagnostic.format())
            return result

        log_info(self.context, f"Compilation complete: {len(result.diagnostics)} diagnostic(s), {len(result.ir)} statement(s) placed")
        return result

    # --- Internal helpers ---

    def _run(self, program: Program, result: CompileResult) -> None:
        # 1. Level types
        log_stage(self.context, "Inferring level types")
        checker = LevelTypeChecker(program, self.context)
        level_types = checker.check()
        result.level_types = level_types
        log_debug(self.context, "Levels: " + ", ".join(f"{k}={v}" for k, v in level_types.levels.items()))

        # 2. Call graph
        log_stage(self.context, "Checking call graph")
        call_graph = CallGraph(checker.signatures.funcs)
        call_graph.check_bounded()
        log_debug(self.context, f"Call graph order: {', '.join(call_graph.topological_order()) or '<empty>'}")

        # 3. Elaboration; the allocator lives exactly as long as this compilation
        log_stage(self.context, "Elaborating calls")
        allocator = NameAllocator(program_names(program))
        elaborated = Elaborator(program, checker.signatures.funcs, self.context, allocator).elaborate()
        result.elaborated = elaborated
        log_debug(self.context, f"Inlined {elaborated.inlined_calls} call site(s)")

        # 4. Levels of elaborated variables
        result.levels = thread_levels(level_types, elaborated)

        if self.context.warn_level_promotion and elaborated.origins:
            resolved = solve_elaborated(elaborated, self.context)
            for diag in find_level_promotions(level_types, elaborated, result.levels, resolved):
                result.diagnostics.append(diag)
                log_warning(self.context, diag.format())

        # 5. Blocks
        log_stage(self.context, "Transforming into blocks")
        result.ir = BlockTransformer(elaborated, result.levels, self.context).transform()
        log_debug(self.context, format_ir(result.ir))


def compile_program(program: Program, context: CompilationContext | None = None) -> CompileResult:
    """Compile one program with a fresh driver."""
    return SlicDriver(context).compile(program)
