# This project was developed with assistance from AI tools.
"""Shared data scope filtering for service queries.

Applicants see only their own record (matched on email), barangay admins
see applicants registered in their barangay, superadmins see everything.
"""

from db import Applicant, ApplicantProfile

from ..schemas.auth import DataScope, UserContext


def apply_data_scope(stmt, scope: DataScope, user: UserContext):
    """Apply data scope filtering to a SQLAlchemy query.

    The statement must already select from (or join) ``Applicant``.

    Args:
        stmt: A SQLAlchemy select statement.
        scope: The caller's DataScope.
        user: The caller's UserContext.

    Returns:
        The filtered statement.
    """
    if scope.all_barangays:
        return stmt
    if scope.own_data_only:
        return stmt.where(Applicant.email == user.email.strip().lower())
    if scope.barangay:
        return stmt.join(
            ApplicantProfile,
            ApplicantProfile.applicant_id == Applicant.id,
        ).where(ApplicantProfile.barangay == scope.barangay)
    # No recognized scope -- nothing visible
    return stmt.where(Applicant.id.is_(None))
