#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Tuple

from slic_ast import Stmt
from slic_ast_printer import format_stmt


class Bucket(Enum):
    DATA = "data"
    TRANSFORMED_DATA = "transformed_data"
    PARAMETERS = "parameters"
    TRANSFORMED_PARAMETERS = "transformed_parameters"
    MODEL = "model"
    GENERATED_QUANTITIES = "generated_quantities"

    @property
    def block_title(self) -> str:
        return self.value.replace("_", " ")


# Stan's block order.
BUCKET_ORDER: Tuple[Bucket, ...] = (
    Bucket.DATA,
    Bucket.TRANSFORMED_DATA,
    Bucket.PARAMETERS,
    Bucket.TRANSFORMED_PARAMETERS,
    Bucket.MODEL,
    Bucket.GENERATED_QUANTITIES,
)


@dataclass
class StanIR:
    """
    Block-structured output of the compiler core.

    Each bucket is an ordered, append-only list of elaborated statements.
    Statements keep their relative source order inside a bucket.
    """
    data: List[Stmt] = field(default_factory=list)
    transformed_data: List[Stmt] = field(default_factory=list)
    parameters: List[Stmt] = field(default_factory=list)
    transformed_parameters: List[Stmt] = field(default_factory=list)
    model: List[Stmt] = field(default_factory=list)
    generated_quantities: List[Stmt] = field(default_factory=list)

    def bucket(self, bucket: Bucket) -> List[Stmt]:
        return getattr(self, bucket.value)

    def append(self, bucket: Bucket, stmt: Stmt) -> None:
        self.bucket(bucket).append(stmt)

    def blocks(self) -> Iterator[Tuple[Bucket, List[Stmt]]]:
        """Buckets in Stan block order."""
        for bucket in BUCKET_ORDER:
            yield bucket, self.bucket(bucket)

    def __len__(self) -> int:
        return sum(len(stmts) for _, stmts in self.blocks())


def format_ir(ir: StanIR) -> str:
    """
    Deterministic, sectioned dump of the IR for logs and golden comparisons.

    Empty buckets are omitted. This is not Stan syntax: declarations keep
    their initializers and sample statements appear as written.
    """
    lines: List[str] = []
    for bucket, stmts in ir.blocks():
        if not stmts:
            continue
        lines.append(f"{bucket.block_title} {{")
        for stmt in stmts:
            lines.extend(format_stmt(stmt, indent=1))
        lines.append("}")
    return "\n".join(lines)
