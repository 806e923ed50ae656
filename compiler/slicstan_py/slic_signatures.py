#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from slic_ast import CallExpr, FuncDecl, Program
from slic_diagnostics import ErrorKind, raise_error
from slic_env import RETURN_SLOT, TypeEnvironment, VarKind, level_node
from slic_levels import Level


class CalleeKind(Enum):
    USER = auto()
    BUILTIN = auto()


@dataclass(frozen=True)
class CalleeResolution:
    name: str
    kind: CalleeKind
    func: Optional[FuncDecl] = None


@dataclass(frozen=True)
class FunctionSignature:
    """
    The single level-typed signature of a user function.

    Computed once per definition and shared by every call site: the levels
    of the parameters, of the body locals and of the return expression.
    """
    name: str
    param_names: Tuple[str, ...]
    param_levels: Tuple[Level, ...]
    local_levels: Tuple[Tuple[str, Level], ...]
    return_level: Level

    def level_of(self, name: str) -> Optional[Level]:
        for param_name, level in zip(self.param_names, self.param_levels):
            if param_name == name:
                return level
        for local_name, level in self.local_levels:
            if local_name == name:
                return level
        return None


class SignatureResolver:
    """
    Resolves the function table of a program and the callee of every call.

      - One definition per function name (no overloading)
      - User functions take precedence over Stan built-ins of the same name
      - Arity is checked for user functions only
    """

    def __init__(self, program: Program, builtins: FrozenSet[str]):
        self.program = program
        self.builtins = builtins
        self.funcs: Dict[str, FuncDecl] = {}

    def resolve(self) -> Dict[str, FuncDecl]:
        for func in self.program.funcs:
            if func.name in self.funcs:
                raise_error(
                    ErrorKind.REDECLARATION,
                    f"[LVL-0040] function '{func.name}' is defined more than once",
                    node=func,
                    name=func.name,
                )
            self.funcs[func.name] = func
        return self.funcs

    def resolve_callee(self, call: CallExpr) -> CalleeResolution:
        func = self.funcs.get(call.callee)
        if func is not None:
            if len(call.args) != len(func.params):
                raise_error(
                    ErrorKind.ARITY_MISMATCH,
                    f"[LVL-0030] function '{func.name}' expects {len(func.params)} argument(s), "
                    f"got {len(call.args)}",
                    node=call,
                    name=func.name,
                    details={"expected": len(func.params), "actual": len(call.args)},
                )
            return CalleeResolution(call.callee, CalleeKind.USER, func)

        if call.callee in self.builtins:
            return CalleeResolution(call.callee, CalleeKind.BUILTIN)

        raise_error(
            ErrorKind.UNDEFINED_FUNCTION,
            f"[LVL-0020] call to undefined function '{call.callee}'",
            node=call,
            name=call.callee,
        )

    def build_signatures(
            self,
            levels: Mapping[str, Level],
            func_envs: Mapping[str, TypeEnvironment],
    ) -> Dict[str, FunctionSignature]:
        signatures: Dict[str, FunctionSignature] = {}
        for name, func in self.funcs.items():
            env = func_envs[name]
            signatures[name] = FunctionSignature(
                name=name,
                param_names=tuple(p.name for p in func.params),
                param_levels=tuple(levels[level_node(name, p.name)] for p in func.params),
                local_levels=tuple(
                    (info.name, levels[info.node_id]) for info in env if info.kind is VarKind.LOCAL
                ),
                return_level=levels[level_node(name, RETURN_SLOT)],
            )
        return signatures
