from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, insert, select, update
from sqlalchemy.engine import Engine

from backoffice.common.errors import NotFound
from backoffice.composite.composite_writer import ChildSpec, CompositeSpec, CompositeWriter
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection, transaction

_LISTING_COLUMNS = (
    "name",
    "price",
    "per_pax_twin",
    "per_pax_triple",
    "child_with_bed",
    "child_without_bed",
    "infant",
    "per_pax_single",
    "overview",
    "inclusive",
    "exclusive",
    "places_nearby",
    "booking_policy",
    "status",
)

_IMAGE_COLUMNS = ("image_url", "is_main", "sort_order")

LISTED = 1
UNLISTED = 0


@dataclass(frozen=True)
class StayListingKind:
    """A listing table, its image table and its code scheme (BUNG0001, WG0001 ...)."""

    spec: CompositeSpec
    code_column: str
    code_prefix: str

    @property
    def images(self) -> ChildSpec:
        return self.spec.children[0]


def _kind(
    entity: str,
    parent,
    images,
    *,
    key: str,
    code_column: str,
    code_prefix: str,
) -> StayListingKind:
    return StayListingKind(
        spec=CompositeSpec(
            entity=entity,
            parent=parent,
            key=key,
            columns=(code_column, *_LISTING_COLUMNS),
            required=("name", "price"),
            children=(
                ChildSpec(
                    name="images",
                    table=images,
                    parent_key=key,
                    columns=_IMAGE_COLUMNS,
                    required=("image_url",),
                ),
            ),
        ),
        code_column=code_column,
        code_prefix=code_prefix,
    )


BUNGALOW_LISTING = _kind(
    "bungalow",
    tables.bungalows,
    tables.bungalow_images,
    key="bungalow_id",
    code_column="bungalow_code",
    code_prefix="BUNG",
)

WEEKEND_GATEWAY_LISTING = _kind(
    "weekend_gateway",
    tables.weekend_gateways,
    tables.weekend_gateway_images,
    key="gateway_id",
    code_column="gateway_code",
    code_prefix="WG",
)


class StayListingRepository:
    """
    Bungalow / weekend gateway listings and their images.

    Listing + image rows are written through the CompositeWriter; the image
    operations that depend on the rows already stored (sort order, the single
    main image) read and write inside one transaction.
    """

    def __init__(self, kind: StayListingKind, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()
        self.kind = kind
        self.writer = CompositeWriter(kind.spec, engine=self._engine)

    # --------------------------------------------------------
    # Listings
    # --------------------------------------------------------

    def next_code(self) -> str:
        parent = self.kind.spec.parent
        code = parent.c[self.kind.code_column]
        prefix = self.kind.code_prefix

        with read_connection(self._engine) as conn:
            last = conn.execute(
                select(code).where(code.like(f"{prefix}%")).order_by(code.desc()).limit(1)
            ).scalar_one_or_none()

        match = re.fullmatch(rf"{prefix}(\d+)", last or "")
        number = int(match.group(1)) + 1 if match else 1
        return f"{prefix}{number:04d}"

    def list_listed(self) -> List[Dict[str, Any]]:
        """Listed rows, newest first, each with its main image URL (or None)."""
        spec = self.kind.spec
        parent = spec.parent
        images = self.kind.images.table
        key = parent.c[spec.key]

        main_image = (
            select(images.c.image_url)
            .where(images.c[spec.key] == key, images.c.is_main.is_(True))
            .limit(1)
            .scalar_subquery()
        )
        with read_connection(self._engine) as conn:
            rows = conn.execute(
                select(parent, main_image.label("main_image"))
                .where(parent.c.status == LISTED)
                .order_by(key.desc())
            ).mappings().all()
        return [dict(r) for r in rows]

    def unlist(self, listing_id: int) -> None:
        spec = self.kind.spec
        parent = spec.parent
        with transaction(self._engine) as conn:
            result = conn.execute(
                update(parent)
                .where(parent.c[spec.key] == listing_id)
                .values(status=UNLISTED)
            )
            if not result.rowcount:
                raise NotFound(f"{spec.entity} {listing_id} not found")

    # --------------------------------------------------------
    # Images
    # --------------------------------------------------------

    def add_images(self, listing_id: int, image_urls: Sequence[str]) -> List[Dict[str, Any]]:
        """
        Append images after the stored ones. The first image of a listing
        without a main image becomes its main image.
        """
        spec = self.kind.spec
        images = self.kind.images.table
        owner = images.c[spec.key]

        with transaction(self._engine) as conn:
            exists = conn.execute(
                select(spec.parent.c[spec.key]).where(spec.parent.c[spec.key] == listing_id)
            ).first()
            if exists is None:
                raise NotFound(f"{spec.entity} {listing_id} not found")

            count = conn.execute(
                select(func.count()).select_from(images).where(owner == listing_id)
            ).scalar_one()
            mains = conn.execute(
                select(func.count())
                .select_from(images)
                .where(owner == listing_id, images.c.is_main.is_(True))
            ).scalar_one()

            rows = [
                {
                    spec.key: listing_id,
                    "image_url": url,
                    "is_main": not mains and i == 0,
                    "sort_order": count + i,
                }
                for i, url in enumerate(image_urls)
            ]
            conn.execute(insert(images), rows)

        return rows

    def set_main_image(self, image_id: int) -> int:
        """Make image_id the only main image of its listing; returns the listing id."""
        spec = self.kind.spec
        images = self.kind.images.table
        owner = images.c[spec.key]

        with transaction(self._engine) as conn:
            listing_id = conn.execute(
                select(owner).where(images.c.image_id == image_id)
            ).scalar_one_or_none()
            if listing_id is None:
                raise NotFound(f"{spec.entity} image {image_id} not found")

            conn.execute(update(images).where(owner == listing_id).values(is_main=False))
            conn.execute(update(images).where(images.c.image_id == image_id).values(is_main=True))

        return int(listing_id)

    def delete_image(self, image_id: int) -> str:
        """Delete one image row; returns its stored URL."""
        spec = self.kind.spec
        images = self.kind.images.table

        with transaction(self._engine) as conn:
            image_url = conn.execute(
                select(images.c.image_url).where(images.c.image_id == image_id)
            ).scalar_one_or_none()
            if image_url is None:
                raise NotFound(f"{spec.entity} image {image_id} not found")
            conn.execute(images.delete().where(images.c.image_id == image_id))

        return image_url
