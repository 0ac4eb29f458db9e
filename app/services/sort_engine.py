from __future__ import annotations

from typing import Sequence

from app.schemas.quote import FetchState
from app.schemas.tracker import SortField, SortSpec

Row = tuple[str, FetchState]


def order_rows(rows: Sequence[Row], spec: SortSpec) -> list[Row]:
    """Order tracker rows for display.

    With no sort field the input order is kept. Otherwise SUCCESS rows are
    ordered by the field value with ties broken by input order, and
    ``desc`` reverses that whole ordering. Rows in any other state always
    follow in input order.
    """
    if spec.field is None:
        return list(rows)

    field = spec.field
    resolved: list[tuple[int, Row]] = []
    pending: list[Row] = []
    for index, row in enumerate(rows):
        if row[1].status == "SUCCESS":
            resolved.append((index, row))
        else:
            pending.append(row)

    resolved.sort(key=lambda item: (getattr(item[1][1].quote, field), item[0]))
    if spec.direction == "desc":
        resolved.reverse()
    return [row for _, row in resolved] + pending


def toggle_sort(spec: SortSpec, field: SortField | None) -> SortSpec:
    if field is None:
        return SortSpec()
    if spec.field == field:
        return SortSpec(field=field, direction="desc" if spec.direction == "asc" else "asc")
    return SortSpec(field=field, direction="asc")


class SortEngine:
    def __init__(self, spec: SortSpec | None = None) -> None:
        self.spec = spec or SortSpec()

    def select(self, field: SortField | None) -> SortSpec:
        self.spec = toggle_sort(self.spec, field)
        return self.spec

    def order(self, rows: Sequence[Row]) -> list[Row]:
        return order_rows(rows, self.spec)
