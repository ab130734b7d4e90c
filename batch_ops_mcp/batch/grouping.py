"""Grouping policy for batch operations."""

from ..models import FileOperation
from ..models import OperationKind


def group_operations(
    operations: list[FileOperation], group_by_type: bool = True
) -> list[list[FileOperation]]:
    """Partition operations into ordered execution groups.

    With grouping enabled each group holds a single kind, groups appear in the
    order their kind is first seen, and operations keep their relative order.
    Without grouping, all operations form one group in original order.
    """
    if not group_by_type:
        return [list(operations)]

    groups: dict[OperationKind, list[FileOperation]] = {}
    for op in operations:
        groups.setdefault(op.kind, []).append(op)
    return list(groups.values())
