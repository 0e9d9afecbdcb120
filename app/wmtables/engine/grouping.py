from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic

from app.wmtables.engine.columns import ColumnConfig, RowT, TableConfig, stringify

UNKNOWN_GROUP = "Unknown"


@dataclass(frozen=True)
class RowGroup(Generic[RowT]):
    key: str
    rows: tuple[RowT, ...]

    @property
    def count(self) -> int:
        return len(self.rows)


def group_rows(
    rows: Sequence[RowT],
    columns: Sequence[ColumnConfig[RowT]],
    group_by: str | None,
) -> list[RowGroup[RowT]] | None:
    """Partition rows by the group column, keeping first-seen group order.

    Returns ``None`` when no usable group column is active so callers fall
    back to pagination.
    """
    if not group_by:
        return None
    column = next((item for item in columns if item.key == group_by), None)
    if column is None or not column.groupable:
        return None
    buckets: dict[str, list[RowT]] = {}
    for row in rows:
        value = column.value_of(row)
        key = UNKNOWN_GROUP if value is None else stringify(value)
        buckets.setdefault(key, []).append(row)
    return [RowGroup(key=key, rows=tuple(members)) for key, members in buckets.items()]


def group_label(group: RowGroup, config: TableConfig) -> str:
    noun = config.entity_name if group.count == 1 else config.entity_name_plural
    return f"{group.key} ({group.count} {noun.lower()})"
