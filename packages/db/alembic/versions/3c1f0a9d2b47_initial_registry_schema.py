# This project was developed with assistance from AI tools.
"""initial registry schema

Revision ID: 3c1f0a9d2b47
Revises:
Create Date: 2026-09-28 10:12:41.503318

"""

import sqlalchemy as sa
from alembic import op

revision = "3c1f0a9d2b47"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "applicants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code_id", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_applicants_code_id", "applicants", ["code_id"], unique=True)
    op.create_index("ix_applicants_email", "applicants", ["email"], unique=True)

    op.create_table(
        "applicant_profiles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("applicant_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("middle_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("suffix", sa.String(20), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("place_of_birth", sa.String(255), nullable=True),
        sa.Column("barangay", sa.String(100), nullable=True),
        sa.Column("education", sa.String(100), nullable=True),
        sa.Column("civil_status", sa.String(30), nullable=True),
        sa.Column("occupation", sa.String(100), nullable=True),
        sa.Column("religion", sa.String(100), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("income", sa.String(50), nullable=True),
        sa.Column("employment_status", sa.String(50), nullable=True),
        sa.Column("contact_number", sa.String(30), nullable=True),
        sa.Column("pantawid_beneficiary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("indigenous", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("classification", sa.String(255), nullable=True),
        sa.Column("needs_problems", sa.Text(), nullable=True),
        sa.Column("emergency_name", sa.String(255), nullable=True),
        sa.Column("emergency_relationship", sa.String(100), nullable=True),
        sa.Column("emergency_address", sa.Text(), nullable=True),
        sa.Column("emergency_contact", sa.String(30), nullable=True),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["applicant_id"], ["applicants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("applicant_id"),
    )
    op.create_index("ix_applicant_profiles_barangay", "applicant_profiles", ["barangay"])

    op.create_table(
        "family_members",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("applicant_id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(300), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("educational_attainment", sa.String(100), nullable=True),
        sa.Column("birthdate", sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(["applicant_id"], ["applicants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_family_members_applicant_id", "family_members", ["applicant_id"])

    op.create_table(
        "applicant_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("applicant_id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("file_name", sa.String(500), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("category", sa.String(20), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column(
            "uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["applicant_id"], ["applicants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("applicant_id", "kind", name="uq_applicant_document_kind"),
    )
    op.create_index("ix_applicant_documents_applicant_id", "applicant_documents", ["applicant_id"])

    op.create_table(
        "applicant_remarks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("applicant_id", sa.Integer(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=False),
        sa.Column("admin_id", sa.String(255), nullable=True),
        sa.Column("superadmin_id", sa.String(255), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["applicant_id"], ["applicants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_applicant_remarks_applicant_id", "applicant_remarks", ["applicant_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("target_id", sa.Integer(), nullable=False),
        sa.Column("audience", sa.String(20), nullable=False),
        sa.Column("kind", sa.String(50), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("barangay", sa.String(100), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["target_id"], ["applicants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_target_id", "notifications", ["target_id"])
    op.create_index("ix_notifications_kind", "notifications", ["kind"])

    op.create_table(
        "status_changes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("applicant_id", sa.Integer(), nullable=False),
        sa.Column("from_status", sa.String(20), nullable=True),
        sa.Column("to_status", sa.String(20), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("changed_by", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["applicant_id"], ["applicants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_status_changes_applicant_id", "status_changes", ["applicant_id"])


def downgrade() -> None:
    op.drop_table("status_changes")
    op.drop_table("notifications")
    op.drop_table("applicant_remarks")
    op.drop_table("applicant_documents")
    op.drop_table("family_members")
    op.drop_table("applicant_profiles")
    op.drop_table("applicants")
