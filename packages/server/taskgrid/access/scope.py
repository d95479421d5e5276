"""
List-query scoping for users who are not elevated.

The builder only decides which rows a query may return. It performs no I/O;
compiling the predicate into SQL belongs to the persistence layer
(see ``taskgrid.services.scoping``).
"""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

from taskgrid_shared.schemas.access import AllRows, RowsWhere, ScopePredicate
from taskgrid_shared.schemas.common import TASK_IDENTITY_FIELDS, EntityKind


def build_scope(
    kind: EntityKind,
    user_id: uuid.UUID,
    *,
    is_elevated: bool,
    within: Optional[Iterable[uuid.UUID]] = None,
) -> ScopePredicate:
    """Build the filter a listing of ``kind`` rows must apply.

    ``is_elevated`` comes from the AccessGuard result for the parent the
    listing ranges over. ``within`` optionally bounds the rows to a set of
    parent ids; an empty set yields a predicate that matches nothing.
    """
    kind = EntityKind(kind)
    if is_elevated:
        return AllRows(entity_kind=kind)

    parent_ids = tuple(within) if within is not None else None

    if kind is EntityKind.TASK:
        return RowsWhere(
            entity_kind=kind,
            user_id=user_id,
            identity_fields=TASK_IDENTITY_FIELDS,
            parent_ids=parent_ids,
        )
    if kind is EntityKind.ORGANIZATION:
        return RowsWhere(
            entity_kind=kind,
            user_id=user_id,
            identity_fields=("owner_id",),
            via_membership=True,
            parent_ids=parent_ids,
        )
    return RowsWhere(
        entity_kind=kind,
        user_id=user_id,
        via_membership=True,
        parent_ids=parent_ids,
    )
