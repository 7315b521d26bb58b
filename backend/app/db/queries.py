"""Scope-safe query helpers.

Each helper compiles a scope object from ``backend.app.access.scope`` into
the equivalent WHERE clause, so SQL reads admit exactly what
``scope.matches`` admits.
"""

from sqlalchemy import ColumnElement, and_, exists, false, or_, select

from backend.app.access.scope import DocumentScope, ProjectScope
from backend.app.db.models import Collaboration, DocumentRow, ProjectRow
from backend.app.models.access import PUBLIC_LEVELS, Access


def document_scope_clause(scope: DocumentScope) -> ColumnElement[bool]:
    """WHERE clause for documents readable within ``scope``.

    Args:
        scope: Document scope of the caller

    Returns:
        Public/exported OR owned OR collaborated OR organization-shared
    """
    public = DocumentRow.access.in_([int(level) for level in PUBLIC_LEVELS])

    if scope.account_id is None:
        return public

    collaborates = exists(
        select(Collaboration.collaboration_id).where(
            Collaboration.document_id == DocumentRow.document_id,
            Collaboration.account_id == scope.account_id,
        )
    )

    return or_(
        public,
        DocumentRow.account_id == scope.account_id,
        collaborates,
        and_(
            DocumentRow.access == int(Access.ORGANIZATION),
            DocumentRow.organization_id == scope.organization_id,
        ),
    )


def project_scope_clause(scope: ProjectScope) -> ColumnElement[bool]:
    """WHERE clause for projects owned within ``scope``."""
    if scope.is_empty:
        return false()
    return ProjectRow.account_id == scope.account_id
