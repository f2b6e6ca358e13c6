# backoffice/composite/update_builder.py
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from sqlalchemy import Table, update
from sqlalchemy.sql.dml import Update

from backoffice.common.errors import ValidationError


class UpdateBuilder:
    """
    Allowlisted partial UPDATE for one table.

    Only fields named in `allowed` can ever reach the SET clause; anything else
    the caller sends is rejected instead of being silently dropped, so the
    update contract of each endpoint is explicit.
    """

    def __init__(self, table: Table, *, key: str, allowed: Iterable[str]) -> None:
        allowed = tuple(allowed)
        missing = [c for c in (key, *allowed) if c not in table.c]
        if missing:
            raise ValueError(f"{table.name} has no column(s): {', '.join(missing)}")
        if key in allowed:
            raise ValueError(f"{table.name}.{key} is the key and cannot be updated")

        self.table = table
        self.key = key
        self.allowed = frozenset(allowed)

    def assignments(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = sorted(k for k in fields if k not in self.allowed)
        if unknown:
            raise ValidationError(
                f"field(s) not updatable on {self.table.name}: {', '.join(unknown)}"
            )
        if not fields:
            raise ValidationError("no updatable fields supplied")
        return dict(fields)

    def build(self, key_value: Any, fields: Mapping[str, Any]) -> Update:
        """updated_at, where the table has one, is refreshed by its column onupdate."""
        values = self.assignments(fields)
        return (
            update(self.table)
            .where(self.table.c[self.key] == key_value)
            .values(**values)
        )
