#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from conftest import program, decl, data, assign, sample, func, call, add, mul, has_error_code
from slic_context import CompilationContext, LogLevel
from slic_diagnostics import DIAGNOSTIC_CODE_FAMILIES, Diagnostic, ErrorKind

# Codes that produce warnings, not errors.
WARNING_CODES = {"LVL-0100"}


def _reparam():
    f = func("f", ["m", "s"], [decl("r"), sample("r", "normal", 0, 1)], add(mul("s", "r"), "m"))
    return program(
        decl("y", call("f", 0, 3)),
        decl("x", call("f", 0, call("exp", "y"))),
        funcs=[f],
    )


def _chain(n):
    """f1 calls f2 calls ... fn; the program calls f1."""
    funcs = [func(f"f{i}", ["a"], [], call(f"f{i + 1}", "a")) for i in range(1, n)]
    funcs.append(func(f"f{n}", ["a"], [], "a"))
    return program(data("y"), decl("z", call("f1", "y")), funcs=funcs)


# code -> (program, context overrides)
TRIGGERS = {
    "LVL-0010": (program(decl("a", "ghost")), {}),
    "LVL-0020": (program(decl("a", call("mystery", 1))), {}),
    "LVL-0030": (program(decl("a", call("f", 1, 2)), funcs=[func("f", ["x"], [], "x")]), {}),
    "LVL-0040": (program(decl("a"), decl("a")), {}),
    "LVL-0050": (program(data("d"), decl("m"), assign("d", "m")), {}),
    "LVL-0060": (program(func("g", ["x"], [], "x"), decl("z", 1.0)), {}),
    "LVL-0100": (_reparam(), {}),
    "ELB-0010": (program(decl("a", call("f", 1)), funcs=[func("f", ["x"], [], call("f", "x"))]), {}),
    "ELB-0020": (_chain(4), {"max_inline_depth": 3}),
}


def _all_codes():
    return [code for codes in DIAGNOSTIC_CODE_FAMILIES.values() for code in codes]


def test_every_registered_code_has_a_trigger():
    assert sorted(_all_codes()) == sorted(TRIGGERS)


@pytest.mark.parametrize("code", _all_codes())
def test_diagnostic_code_triggers(code, compile_program):
    prog, overrides = TRIGGERS[code]
    result = compile_program(prog, CompilationContext(log_level=LogLevel.SILENT, **overrides))

    if code not in WARNING_CODES:
        assert result.has_errors(), f"expected errors for {code}, got: {[d.message for d in result.diagnostics]}"
    else:
        assert not result.has_errors(), f"unexpected errors: {[d.message for d in result.diagnostics]}"
    assert has_error_code(result.diagnostics, code), \
        f"expected [{code}] in diagnostics: {[d.message for d in result.diagnostics]}"


@pytest.mark.parametrize(
    "code, kind",
    [
        ("LVL-0010", ErrorKind.UNDEFINED_VARIABLE),
        ("LVL-0020", ErrorKind.UNDEFINED_FUNCTION),
        ("LVL-0030", ErrorKind.ARITY_MISMATCH),
        ("LVL-0040", ErrorKind.REDECLARATION),
        ("LVL-0050", ErrorKind.INCONSISTENT_LEVEL_CONSTRAINTS),
        ("LVL-0060", ErrorKind.NESTED_FUNCTION_DEFINITION),
        ("ELB-0010", ErrorKind.NON_TERMINATING_ELABORATION),
        ("ELB-0020", ErrorKind.NON_TERMINATING_ELABORATION),
    ],
)
def test_error_kind_matches_code(code, kind, compile_program):
    prog, overrides = TRIGGERS[code]
    result = compile_program(prog, CompilationContext(log_level=LogLevel.SILENT, **overrides))

    assert result.error_kind is kind
    assert result.error.code == code


def test_diagnostic_format():
    diag = Diagnostic(kind="error", message="[LVL-0010] use of undeclared variable 'b'", line=4, column=9)

    assert diag.format() == "4:9: error: [LVL-0010] use of undeclared variable 'b'"
    assert diag.code == "LVL-0010"


def test_diagnostic_format_without_location():
    diag = Diagnostic(kind="warning", message="no code here")

    assert diag.format() == "warning: no code here"
    assert diag.code is None
