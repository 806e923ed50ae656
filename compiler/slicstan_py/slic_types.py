#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import FrozenSet, Iterable

# ========================================
# Built-in Stan functions.
# ========================================

# Functions from the Stan math library that may be called without a user
# definition. Calls to these survive elaboration untouched.
STAN_BUILTIN_FUNCTIONS: FrozenSet[str] = frozenset({
    "abs", "fabs", "fmin", "fmax", "fmod", "floor", "ceil", "round", "trunc",
    "sqrt", "cbrt", "square", "exp", "exp2", "expm1", "log", "log2", "log10", "log1p",
    "log1m", "log_sum_exp", "pow", "inv", "inv_sqrt", "inv_square", "hypot",
    "sin", "cos", "tan", "asin", "acos", "atan", "atan2", "sinh", "cosh", "tanh",
    "asinh", "acosh", "atanh", "logit", "inv_logit", "log_inv_logit", "log1m_inv_logit",
    "erf", "erfc", "Phi", "Phi_approx", "inv_Phi", "lgamma", "tgamma", "digamma",
    "lbeta", "lchoose", "binomial_coefficient_log", "fdim", "fma", "step",
    "sum", "prod", "mean", "variance", "sd", "min", "max", "dot_product",
    "dot_self", "rows", "cols", "num_elements", "size", "rep_vector",
    "rep_row_vector", "rep_matrix", "softmax", "log_softmax", "cumulative_sum",
    "to_vector", "to_row_vector", "to_matrix", "diag_matrix", "diagonal",
    "cholesky_decompose", "inverse", "determinant", "log_determinant", "transpose",
})


def builtin_function_names(extra: Iterable[str] = ()) -> FrozenSet[str]:
    """The built-in function registry, optionally extended by the caller."""
    extra = frozenset(extra)
    if not extra:
        return STAN_BUILTIN_FUNCTIONS
    return STAN_BUILTIN_FUNCTIONS | extra
