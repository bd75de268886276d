# This project was developed with assistance from AI tools.
"""Tests for the required-document policy."""

import pytest
from db.enums import CivilStatus, DocumentKind

from src.services.errors import InvalidDocumentKind
from src.services.requirements import (
    BASE_DOCUMENTS,
    document_label,
    normalize_civil_status,
    parse_document_kind,
    required_documents,
)

PSA, ITR, MED = DocumentKind.PSA, DocumentKind.ITR, DocumentKind.MED_CERT


@pytest.mark.parametrize(
    "civil_status,expected",
    [
        ("single", [PSA, ITR, MED, DocumentKind.CENOMAR]),
        ("married", [PSA, ITR, MED, DocumentKind.MARRIAGE]),
        ("divorced", [PSA, ITR, MED, DocumentKind.MARRIAGE]),
        ("widowed", [PSA, ITR, MED, DocumentKind.MARRIAGE, DocumentKind.DEATH_CERT]),
        ("other", [PSA, ITR, MED]),
    ],
)
def test_required_documents_by_civil_status(civil_status, expected):
    assert required_documents(civil_status) == expected


def test_required_documents_is_case_and_whitespace_insensitive():
    assert required_documents("  Widowed ") == required_documents("widowed")
    assert required_documents("SINGLE") == required_documents("single")


@pytest.mark.parametrize("civil_status", [None, "", "separated", "annulled"])
def test_unknown_civil_status_falls_back_to_base_set(civil_status):
    assert required_documents(civil_status) == list(BASE_DOCUMENTS)


def test_required_documents_never_include_barangay_cert():
    for status in CivilStatus:
        assert DocumentKind.BARANGAY_CERT not in required_documents(status.value)


def test_normalize_civil_status():
    assert normalize_civil_status(" Married") == CivilStatus.MARRIED
    assert normalize_civil_status("live-in") is None
    assert normalize_civil_status(None) is None


def test_parse_document_kind_accepts_enum_and_text():
    assert parse_document_kind(DocumentKind.ITR) is DocumentKind.ITR
    assert parse_document_kind(" PSA ") is DocumentKind.PSA


def test_parse_document_kind_rejects_unknown_kind():
    with pytest.raises(InvalidDocumentKind) as exc_info:
        parse_document_kind("passport")
    assert exc_info.value.status_code == 422
    assert exc_info.value.kind == "passport"


def test_document_labels():
    assert document_label(DocumentKind.CENOMAR) == "CENOMAR"
    assert document_label(DocumentKind.PSA) == "PSA Birth Certificate"


def test_only_barangay_cert_lacks_category():
    assert not DocumentKind.BARANGAY_CERT.has_category
    assert all(k.has_category for k in DocumentKind if k is not DocumentKind.BARANGAY_CERT)
