# backoffice/composite/composite_writer.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import Table, delete, insert, select
from sqlalchemy.engine import Connection, Engine

from backoffice.common.errors import NotFound, ValidationError
from backoffice.composite.update_builder import UpdateBuilder
from backoffice.db.core import get_engine, read_connection, transaction

logger = logging.getLogger(__name__)


# ============================================================
# Spec types
# ============================================================

@dataclass(frozen=True)
class ChildSpec:
    """
    One 1:N child collection of a parent table.

    name       : key of the collection in the payload / fetch result
    parent_key : FK column that receives the parent's generated key
    columns    : columns a caller may set (parent_key excluded, it is injected)
    """

    name: str
    table: Table
    parent_key: str
    columns: Tuple[str, ...]
    required: Tuple[str, ...] = ()

    @property
    def order_column(self):
        return list(self.table.primary_key.columns)[0]


@dataclass(frozen=True)
class CompositeSpec:
    entity: str
    parent: Table
    key: str
    columns: Tuple[str, ...]
    required: Tuple[str, ...] = ()
    children: Tuple[ChildSpec, ...] = ()

    def child(self, name: str) -> ChildSpec:
        for c in self.children:
            if c.name == name:
                return c
        raise KeyError(name)


@dataclass
class CompositePayload:
    parent: Dict[str, Any]
    children: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)


@dataclass(frozen=True)
class CompositeWriteResult:
    parent_id: int
    child_counts: Dict[str, int]


# ============================================================
# Writer
# ============================================================

class CompositeWriter:
    """
    All-or-nothing persistence of one parent row and its child collections.

    Responsibilities:
      - payload validation before any connection is checked out
      - parent INSERT, child bulk INSERT with the generated key injected
      - replace-set update (delete all children, re-insert the new sets)
      - append (parent fields updated, new child rows added to the existing ones)
      - delete (children first, then the parent)

    Every write runs inside db.core.transaction(): one dedicated connection,
    commit on success, rollback + PersistenceError on database failure, the
    connection released on every path.
    """

    def __init__(self, spec: CompositeSpec, *, engine: Optional[Engine] = None) -> None:
        self._spec = spec
        self._engine = engine or get_engine()
        self._parent_update = UpdateBuilder(
            spec.parent, key=spec.key, allowed=spec.columns
        )

    @property
    def spec(self) -> CompositeSpec:
        return self._spec

    # --------------------------------------------------------
    # Write
    # --------------------------------------------------------

    def create(self, payload: CompositePayload) -> CompositeWriteResult:
        parent_row, child_rows = self._validate(payload)
        spec = self._spec

        with transaction(self._engine) as conn:
            result = conn.execute(insert(spec.parent).values(**parent_row))
            parent_id = int(result.inserted_primary_key[0])
            counts = self._insert_children(conn, parent_id, child_rows)

        logger.info(
            "%s created id=%s children=%s",
            spec.entity,
            parent_id,
            counts,
            extra={"entity": spec.entity, "parent_id": parent_id},
        )
        return CompositeWriteResult(parent_id=parent_id, child_counts=counts)

    def replace(self, parent_id: int, payload: CompositePayload) -> CompositeWriteResult:
        """
        Update parent fields and replace every child collection wholesale.

        A collection missing from the payload is replaced by the empty set;
        there is no differential update of child rows.
        """
        parent_row, child_rows = self._validate(payload)
        spec = self._spec

        with transaction(self._engine) as conn:
            if parent_row:
                result = conn.execute(self._parent_update.build(parent_id, parent_row))
                matched = result.rowcount
            else:
                matched = self._count_parents(conn, [parent_id])
            if not matched:
                raise NotFound(f"{spec.entity} {parent_id} not found")

            self._delete_children(conn, [parent_id])
            counts = self._insert_children(conn, parent_id, child_rows)

        logger.info(
            "%s replaced id=%s children=%s",
            spec.entity,
            parent_id,
            counts,
            extra={"entity": spec.entity, "parent_id": parent_id},
        )
        return CompositeWriteResult(parent_id=parent_id, child_counts=counts)

    def append(self, parent_id: int, payload: CompositePayload) -> CompositeWriteResult:
        """
        Update the parent fields present (and not None) in the payload and add
        the given child rows next to the existing ones. child_counts are the
        rows added.
        """
        parent_row, child_rows = self._validate(payload, partial=True)
        parent_row = {k: v for k, v in parent_row.items() if v is not None}
        spec = self._spec

        with transaction(self._engine) as conn:
            if parent_row:
                matched = conn.execute(self._parent_update.build(parent_id, parent_row)).rowcount
            else:
                matched = self._count_parents(conn, [parent_id])
            if not matched:
                raise NotFound(f"{spec.entity} {parent_id} not found")

            counts = self._insert_children(conn, parent_id, child_rows)

        logger.info(
            "%s appended id=%s children=%s",
            spec.entity,
            parent_id,
            counts,
            extra={"entity": spec.entity, "parent_id": parent_id},
        )
        return CompositeWriteResult(parent_id=parent_id, child_counts=counts)

    def delete(self, parent_id: int) -> None:
        spec = self._spec
        with transaction(self._engine) as conn:
            self._delete_children(conn, [parent_id])
            result = conn.execute(
                delete(spec.parent).where(spec.parent.c[spec.key] == parent_id)
            )
            if not result.rowcount:
                raise NotFound(f"{spec.entity} {parent_id} not found")

        logger.info("%s deleted id=%s", spec.entity, parent_id)

    def delete_many(self, parent_ids: Sequence[int]) -> int:
        ids = list(parent_ids)
        if not ids:
            raise ValidationError(f"no {self._spec.entity} ids provided")

        spec = self._spec
        with transaction(self._engine) as conn:
            self._delete_children(conn, ids)
            result = conn.execute(
                delete(spec.parent).where(spec.parent.c[spec.key].in_(ids))
            )
            deleted = int(result.rowcount or 0)

        logger.info("%s bulk deleted count=%s", spec.entity, deleted)
        return deleted

    # --------------------------------------------------------
    # Read
    # --------------------------------------------------------

    def fetch(self, parent_id: int) -> Dict[str, Any]:
        """Parent row plus every child collection, keyed by ChildSpec.name."""
        spec = self._spec
        with read_connection(self._engine) as conn:
            row = conn.execute(
                select(spec.parent).where(spec.parent.c[spec.key] == parent_id)
            ).mappings().first()
            if row is None:
                raise NotFound(f"{spec.entity} {parent_id} not found")

            data = dict(row)
            for child in spec.children:
                rows = conn.execute(
                    select(child.table)
                    .where(child.table.c[child.parent_key] == parent_id)
                    .order_by(child.order_column)
                ).mappings().all()
                data[child.name] = [dict(r) for r in rows]
        return data

    # ========================================================
    # Internal helpers
    # ========================================================

    def _validate(
        self, payload: CompositePayload, *, partial: bool = False
    ) -> Tuple[Dict[str, Any], Dict[str, List[Dict[str, Any]]]]:
        spec = self._spec
        parent_row = self._clean_row(
            spec.parent,
            payload.parent,
            allowed=spec.columns,
            required=() if partial else spec.required,
            label=spec.entity,
        )

        unknown = sorted(set(payload.children) - {c.name for c in spec.children})
        if unknown:
            raise ValidationError(
                f"unknown child collection(s) for {spec.entity}: {', '.join(unknown)}"
            )

        child_rows: Dict[str, List[Dict[str, Any]]] = {}
        for child in spec.children:
            rows = payload.children.get(child.name) or []
            if not isinstance(rows, (list, tuple)):
                raise ValidationError(f"{child.name} must be a list")

            cleaned: List[Dict[str, Any]] = []
            for index, row in enumerate(rows):
                if not isinstance(row, Mapping):
                    raise ValidationError(f"{child.name}[{index}] must be an object")
                cleaned.append(
                    self._clean_row(
                        child.table,
                        row,
                        allowed=child.columns,
                        required=child.required,
                        label=f"{child.name}[{index}]",
                    )
                )
            child_rows[child.name] = cleaned

        return parent_row, child_rows

    @staticmethod
    def _clean_row(
        table: Table,
        row: Mapping[str, Any],
        *,
        allowed: Sequence[str],
        required: Sequence[str],
        label: str,
    ) -> Dict[str, Any]:
        unknown = sorted(k for k in row if k not in allowed)
        if unknown:
            raise ValidationError(f"{label}: unknown field(s) {', '.join(unknown)}")

        missing = [
            name
            for name in required
            if row.get(name) is None
            or (isinstance(row.get(name), str) and not row.get(name).strip())
        ]
        if missing:
            raise ValidationError(f"{label}: missing required field(s) {', '.join(missing)}")

        # None on a column with a server default means "use the default"
        return {
            k: v
            for k, v in row.items()
            if not (v is None and table.c[k].server_default is not None)
        }

    def _insert_children(
        self,
        conn: Connection,
        parent_id: int,
        child_rows: Dict[str, List[Dict[str, Any]]],
    ) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for child in self._spec.children:
            rows = [
                {**row, child.parent_key: parent_id}
                for row in child_rows.get(child.name, [])
            ]
            if len({frozenset(r) for r in rows}) == 1:
                conn.execute(insert(child.table), rows)
            else:
                # executemany needs one key set; keep insertion order otherwise
                for row in rows:
                    conn.execute(insert(child.table).values(**row))
            counts[child.name] = len(rows)
        return counts

    def _delete_children(self, conn: Connection, parent_ids: List[int]) -> None:
        for child in self._spec.children:
            conn.execute(
                delete(child.table).where(child.table.c[child.parent_key].in_(parent_ids))
            )

    def _count_parents(self, conn: Connection, parent_ids: List[int]) -> int:
        spec = self._spec
        rows = conn.execute(
            select(spec.parent.c[spec.key]).where(spec.parent.c[spec.key].in_(parent_ids))
        ).all()
        return len(rows)
