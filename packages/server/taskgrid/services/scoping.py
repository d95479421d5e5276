"""
Compile access scope predicates into SQLAlchemy clauses.

The access core hands over a ``ScopePredicate`` unmodified; this module is the
only place it becomes SQL. A ``RowsWhere`` compiles to exactly the OR of its
conditions, and to ``false()`` when it can match nothing.
"""

from __future__ import annotations

from sqlalchemy import and_, false, or_, true
from sqlmodel import select

from taskgrid.models.membership import membership_table
from taskgrid.models.organization import Organization
from taskgrid.models.project import Project
from taskgrid.models.task import Task
from taskgrid.models.workspace import Workspace
from taskgrid_shared.schemas.access import AllRows, RowsWhere
from taskgrid_shared.schemas.common import EntityKind

# kind -> (row model, column bounded by RowsWhere.parent_ids)
SCOPED_MODELS = {
    EntityKind.ORGANIZATION: (Organization, "id"),
    EntityKind.WORKSPACE: (Workspace, "organization_id"),
    EntityKind.PROJECT: (Project, "workspace_id"),
    EntityKind.TASK: (Task, "project_id"),
}


def scope_clause(predicate: AllRows | RowsWhere):
    """Return the WHERE clause for ``predicate`` against its entity's table."""
    if isinstance(predicate, AllRows):
        return true()
    if predicate.matches_nothing:
        return false()

    model, parent_attr = SCOPED_MODELS[predicate.entity_kind]
    conditions = [getattr(model, field) == predicate.user_id for field in predicate.identity_fields]

    if predicate.via_membership:
        member_model, entity_col = membership_table(predicate.entity_kind)
        conditions.append(
            select(member_model.user_id)
            .where(member_model.user_id == predicate.user_id, entity_col == model.id)
            .exists()
        )

    clause = or_(*conditions)
    if predicate.parent_ids is not None:
        clause = and_(getattr(model, parent_attr).in_(predicate.parent_ids), clause)
    return clause


def apply_scope(stmt, predicate: AllRows | RowsWhere):
    """Add the scope filter to a select over the predicate's entity table."""
    if isinstance(predicate, AllRows):
        return stmt
    return stmt.where(scope_clause(predicate))
