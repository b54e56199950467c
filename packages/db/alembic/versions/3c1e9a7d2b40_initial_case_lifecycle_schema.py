# This project was developed with assistance from AI tools.
"""initial case lifecycle schema

Revision ID: 3c1e9a7d2b40
Revises:
Create Date: 2026-10-19 09:12:41.502311

"""

import sqlalchemy as sa
from alembic import op

revision = "3c1e9a7d2b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "case_number_sequence",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "allocated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "cases",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("case_number", sa.String(32), nullable=False),
        sa.Column("subcontractor_id", sa.String(255), nullable=False),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column("buyer_id", sa.String(255), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="SUBMITTED"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("buyer_details", sa.JSON(), nullable=False),
        sa.Column("invoice_details", sa.JSON(), nullable=False),
        sa.Column("cwc_request", sa.JSON(), nullable=False),
        sa.Column("interest_preference", sa.JSON(), nullable=False),
        sa.Column("selected_nbfc_id", sa.String(255), nullable=True),
        sa.Column("selected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("final_interest_rate", sa.Numeric(5, 2), nullable=True),
        sa.Column("final_tenure", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("case_number"),
    )
    op.create_index("ix_cases_subcontractor_id", "cases", ["subcontractor_id"])
    op.create_index("ix_cases_status_subcontractor", "cases", ["status", "subcontractor_id"])
    op.create_index("ix_cases_buyer_status", "cases", ["buyer_id", "status"])

    op.create_table(
        "case_timeline_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.String(36), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("actor_id", sa.String(255), nullable=True),
        sa.Column("actor_role", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("case_id", "sequence", name="uq_case_timeline_sequence"),
    )
    op.create_index("ix_case_timeline_entries_case_id", "case_timeline_entries", ["case_id"])

    op.create_table(
        "nbfc_quotations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.String(36), nullable=False),
        sa.Column("nbfc_id", sa.String(255), nullable=False),
        sa.Column("nbfc_name", sa.String(255), nullable=True),
        sa.Column("offered_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("interest_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("tenure", sa.Integer(), nullable=False),
        sa.Column("processing_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("terms", sa.Text(), nullable=True),
        sa.Column("quoted_by", sa.String(255), nullable=True),
        sa.Column(
            "quoted_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("case_id", "nbfc_id", name="uq_quotation_case_nbfc"),
    )
    op.create_index("ix_nbfc_quotations_case_id", "nbfc_quotations", ["case_id"])
    op.create_index("ix_nbfc_quotations_nbfc_id", "nbfc_quotations", ["nbfc_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("user_name", sa.String(255), nullable=True),
        sa.Column("user_email", sa.String(255), nullable=True),
        sa.Column("user_role", sa.String(50), nullable=True),
        sa.Column("action", sa.String(40), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=True),
        sa.Column("entity_id", sa.String(255), nullable=True),
        sa.Column("entity_ref", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("previous_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("request_path", sa.String(512), nullable=True),
        sa.Column("request_method", sa.String(10), nullable=True),
        sa.Column("request_id", sa.String(64), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_user_created", "audit_logs", ["user_id", "created_at"])
    op.create_index("ix_audit_logs_action_created", "audit_logs", ["action", "created_at"])
    op.create_index("ix_audit_logs_category_created", "audit_logs", ["category", "created_at"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])

    op.create_table(
        "career_applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("role", sa.String(255), nullable=False),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column("experience", sa.String(100), nullable=False),
        sa.Column("current_company", sa.String(255), nullable=True),
        sa.Column("linkedin_url", sa.String(500), nullable=True),
        sa.Column("portfolio_url", sa.String(500), nullable=True),
        sa.Column("cover_letter", sa.Text(), nullable=True),
        sa.Column("resume_url", sa.String(500), nullable=True),
        sa.Column("status", sa.String(9), nullable=False, server_default="NEW"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.String(255), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_career_applications_email", "career_applications", ["email"])
    op.create_index("ix_career_applications_status", "career_applications", ["status"])


def downgrade() -> None:
    op.drop_index("ix_career_applications_status", table_name="career_applications")
    op.drop_index("ix_career_applications_email", table_name="career_applications")
    op.drop_table("career_applications")

    op.drop_index("ix_audit_logs_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_logs_entity", table_name="audit_logs")
    op.drop_index("ix_audit_logs_category_created", table_name="audit_logs")
    op.drop_index("ix_audit_logs_action_created", table_name="audit_logs")
    op.drop_index("ix_audit_logs_user_created", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_nbfc_quotations_nbfc_id", table_name="nbfc_quotations")
    op.drop_index("ix_nbfc_quotations_case_id", table_name="nbfc_quotations")
    op.drop_table("nbfc_quotations")

    op.drop_index("ix_case_timeline_entries_case_id", table_name="case_timeline_entries")
    op.drop_table("case_timeline_entries")

    op.drop_index("ix_cases_buyer_status", table_name="cases")
    op.drop_index("ix_cases_status_subcontractor", table_name="cases")
    op.drop_index("ix_cases_subcontractor_id", table_name="cases")
    op.drop_table("cases")

    op.drop_table("case_number_sequence")
