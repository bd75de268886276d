# This project was developed with assistance from AI tools.
"""Required-document policy.

Which supporting documents an applicant must provide depends only on the
civil status captured at intake.
"""

from db.enums import CivilStatus, DocumentKind

from .errors import InvalidDocumentKind

# Human-readable labels for document kinds
DOCUMENT_LABELS: dict[DocumentKind, str] = {
    DocumentKind.PSA: "PSA Birth Certificate",
    DocumentKind.ITR: "Income Tax Return",
    DocumentKind.MED_CERT: "Medical Certificate",
    DocumentKind.MARRIAGE: "Marriage Certificate",
    DocumentKind.CENOMAR: "CENOMAR",
    DocumentKind.DEATH_CERT: "Death Certificate",
    DocumentKind.BARANGAY_CERT: "Barangay Certificate",
}

BASE_DOCUMENTS: tuple[DocumentKind, ...] = (
    DocumentKind.PSA,
    DocumentKind.ITR,
    DocumentKind.MED_CERT,
)

# Extra documents by civil status, appended to BASE_DOCUMENTS
_EXTRA_DOCUMENTS: dict[CivilStatus, tuple[DocumentKind, ...]] = {
    CivilStatus.SINGLE: (DocumentKind.CENOMAR,),
    CivilStatus.MARRIED: (DocumentKind.MARRIAGE,),
    CivilStatus.DIVORCED: (DocumentKind.MARRIAGE,),
    CivilStatus.WIDOWED: (DocumentKind.MARRIAGE, DocumentKind.DEATH_CERT),
}


def normalize_civil_status(civil_status: str | None) -> CivilStatus | None:
    """Map free-text civil status to the enum, or None when unrecognized."""
    if not civil_status:
        return None
    try:
        return CivilStatus(civil_status.strip().lower())
    except ValueError:
        return None


def required_documents(civil_status: str | None) -> list[DocumentKind]:
    """Return the document kinds an applicant with this civil status must provide.

    Case-insensitive and whitespace-tolerant; unknown or missing values fall
    back to the base set.
    """
    extra = _EXTRA_DOCUMENTS.get(normalize_civil_status(civil_status), ())
    return [*BASE_DOCUMENTS, *extra]


def document_label(kind: DocumentKind) -> str:
    return DOCUMENT_LABELS.get(kind, kind.value)


def parse_document_kind(value: str | DocumentKind) -> DocumentKind:
    """Resolve a caller-supplied kind, raising InvalidDocumentKind if unknown."""
    if isinstance(value, DocumentKind):
        return value
    try:
        return DocumentKind(str(value).strip().lower())
    except ValueError as exc:
        raise InvalidDocumentKind(str(value)) from exc
