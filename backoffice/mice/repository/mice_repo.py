from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine

from backoffice.composite.composite_writer import ChildSpec, CompositeSpec, CompositeWriter
from backoffice.composite.question_page import question_page_spec
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection

MICE_MAIN_SPEC = question_page_spec(
    "mice_main",
    tables.mice_main,
    tables.mice_questions,
    parent_key="mice_main_id",
)

MICE_PACKAGE_SPEC = CompositeSpec(
    entity="mice_package",
    parent=tables.mice_packages,
    key="id",
    columns=("days", "price"),
    required=("days", "price"),
    children=(
        ChildSpec(
            name="images",
            table=tables.mice_package_images,
            parent_key="package_id",
            columns=("image_path",),
            required=("image_path",),
        ),
    ),
)


class MicePackageRepository:
    def __init__(self, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()
        self.writer = CompositeWriter(MICE_PACKAGE_SPEC, engine=self._engine)

    def list_with_images(self) -> List[Dict[str, Any]]:
        p = tables.mice_packages
        i = tables.mice_package_images
        with read_connection(self._engine) as conn:
            packages = [
                dict(r)
                for r in conn.execute(
                    select(p).order_by(p.c.created_at.desc(), p.c.id.desc())
                ).mappings()
            ]
            images = conn.execute(select(i).order_by(i.c.id)).mappings().all()

        by_package: Dict[int, List[Dict[str, Any]]] = {pkg["id"]: [] for pkg in packages}
        for img in images:
            by_package.setdefault(img["package_id"], []).append(dict(img))
        for pkg in packages:
            pkg["images"] = by_package[pkg["id"]]
        return packages
