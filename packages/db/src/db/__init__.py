# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import (
    Base,
    DatabaseService,
    create_registry_engine,
    get_db,
    get_db_service,
    registry_sessionmaker,
)
from .enums import (
    ApplicantStatus,
    CivilStatus,
    DocumentCategory,
    DocumentKind,
    DocumentStatus,
    NotificationAudience,
    UserRole,
)
from .models import (
    Applicant,
    ApplicantDocument,
    ApplicantProfile,
    ApplicantRemark,
    FamilyMember,
    Notification,
    StatusChange,
)

__all__ = [
    "Base",
    "DatabaseService",
    "create_registry_engine",
    "get_db",
    "get_db_service",
    "registry_sessionmaker",
    "__version__",
    # Enums
    "ApplicantStatus",
    "CivilStatus",
    "DocumentCategory",
    "DocumentKind",
    "DocumentStatus",
    "NotificationAudience",
    "UserRole",
    # Models
    "Applicant",
    "ApplicantDocument",
    "ApplicantProfile",
    "ApplicantRemark",
    "FamilyMember",
    "Notification",
    "StatusChange",
]
