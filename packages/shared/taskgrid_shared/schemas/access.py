from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from .common import EntityKind, Role, RoleSource


class AccessResult(BaseModel):
    """Outcome of a successful access resolution for one entity."""

    is_elevated: bool
    role: Optional[Role] = None
    source: RoleSource
    entity_kind: EntityKind
    entity_id: UUID
    user_id: UUID
    via_entity_grant: bool = False

    model_config = {"frozen": True}


class AllRows(BaseModel):
    kind: Literal["all_rows"] = "all_rows"
    entity_kind: EntityKind

    model_config = {"frozen": True}


class RowsWhere(BaseModel):
    """Rows a non-elevated user may see.

    A row matches when any ``identity_fields`` column equals ``user_id`` or,
    with ``via_membership``, when the user holds a membership edge on it.
    ``parent_ids`` bounds the rows to those under the given parents; an empty
    tuple matches nothing.
    """

    kind: Literal["rows_where"] = "rows_where"
    entity_kind: EntityKind
    user_id: UUID
    identity_fields: tuple[str, ...] = ()
    via_membership: bool = False
    parent_ids: Optional[tuple[UUID, ...]] = None

    model_config = {"frozen": True}

    @property
    def matches_nothing(self) -> bool:
        if self.parent_ids is not None and len(self.parent_ids) == 0:
            return True
        return not self.identity_fields and not self.via_membership


ScopePredicate = Annotated[Union[AllRows, RowsWhere], Field(discriminator="kind")]
