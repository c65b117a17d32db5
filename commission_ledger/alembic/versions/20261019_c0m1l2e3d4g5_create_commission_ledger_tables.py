"""create commission ledger tables

Revision ID: c0m1l2e3d4g5
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "c0m1l2e3d4g5"
down_revision = None
branch_labels = None
depends_on = None

_MONEY = sa.Numeric(precision=14, scale=4)


def _timestamp(name: str) -> sa.Column:  # type: ignore[type-arg]
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("(CURRENT_TIMESTAMP)"),
        nullable=True,
    )


def upgrade() -> None:
    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("subject_name", sa.String(length=255), nullable=False),
        sa.Column("recipient_type", sa.String(length=20), nullable=True),
        sa.Column("reservation_id", sa.String(length=36), nullable=False),
        sa.Column("reservation_number", sa.String(length=50), nullable=False),
        sa.Column("tour_id", sa.String(length=64), nullable=True),
        sa.Column("tour_name", sa.String(length=255), nullable=True),
        sa.Column("client_name", sa.String(length=255), nullable=True),
        sa.Column("client_country", sa.String(length=100), nullable=True),
        sa.Column("adults", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("children", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("infants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("operation_date", sa.Date(), nullable=False),
        sa.Column("gross_amount", _MONEY, nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("rate", sa.Numeric(precision=7, scale=4), nullable=True),
        sa.Column("computed_amount", _MONEY, nullable=True),
        sa.Column("cost_amount", _MONEY, nullable=True),
        sa.Column("operation_type", sa.String(length=20), nullable=True),
        sa.Column("logistic_status", sa.String(length=20), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ledger_entries_kind"), "ledger_entries", ["kind"], unique=False)
    op.create_index(
        op.f("ix_ledger_entries_subject_name"), "ledger_entries", ["subject_name"], unique=False
    )
    op.create_index(
        op.f("ix_ledger_entries_reservation_id"), "ledger_entries", ["reservation_id"], unique=False
    )
    op.create_index(
        op.f("ix_ledger_entries_reservation_number"),
        "ledger_entries",
        ["reservation_number"],
        unique=False,
    )
    op.create_index("ix_ledger_entries_kind_status", "ledger_entries", ["kind", "status"])

    op.create_table(
        "adjustment_requests",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("item_id", sa.String(length=36), nullable=False),
        sa.Column("item_type", sa.String(length=20), nullable=False),
        sa.Column("original_amount", _MONEY, nullable=False),
        sa.Column("new_amount", _MONEY, nullable=False),
        sa.Column("adjustment_amount", _MONEY, nullable=False),
        sa.Column("adjustment_type", sa.String(length=20), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("requested_by", sa.String(length=255), nullable=False),
        sa.Column("requested_by_name", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("reviewed_by", sa.String(length=255), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_reason", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["item_id"], ["ledger_entries.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_adjustment_requests_item_id"), "adjustment_requests", ["item_id"], unique=False
    )
    op.create_index(
        op.f("ix_adjustment_requests_status"), "adjustment_requests", ["status"], unique=False
    )

    op.create_table(
        "closings",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("invoice_number", sa.String(length=50), nullable=False),
        sa.Column("sequence_number", sa.Integer(), nullable=False),
        sa.Column("closing_type", sa.String(length=20), nullable=False),
        sa.Column("recipient_name", sa.String(length=255), nullable=False),
        sa.Column("recipient_id", sa.String(length=64), nullable=True),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("item_count", sa.Integer(), nullable=False),
        sa.Column("total_amount", _MONEY, nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("created_by_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("undone_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("undone_by", sa.String(length=255), nullable=True),
        sa.Column("undone_by_name", sa.String(length=255), nullable=True),
        sa.Column("undo_reason", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "closing_type", "sequence_number", name="uq_closings_type_sequence"
        ),
    )
    op.create_index(op.f("ix_closings_invoice_number"), "closings", ["invoice_number"], unique=True)
    op.create_index(op.f("ix_closings_closing_type"), "closings", ["closing_type"], unique=False)
    op.create_index(op.f("ix_closings_is_active"), "closings", ["is_active"], unique=False)

    op.create_table(
        "closing_line_items",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("closing_id", sa.String(length=36), nullable=False),
        sa.Column("ledger_entry_id", sa.String(length=36), nullable=False),
        sa.Column("reservation_number", sa.String(length=50), nullable=False),
        sa.Column("tour_name", sa.String(length=255), nullable=True),
        sa.Column("client_name", sa.String(length=255), nullable=True),
        sa.Column("subject_name", sa.String(length=255), nullable=False),
        sa.Column("pax", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("operation_date", sa.Date(), nullable=False),
        sa.Column("gross_amount", _MONEY, nullable=False),
        sa.Column("rate", sa.Numeric(precision=7, scale=4), nullable=True),
        sa.Column("original_amount", _MONEY, nullable=False),
        sa.Column("amount", _MONEY, nullable=False),
        sa.Column("is_overridden", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("override_notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("logistic_status", sa.String(length=20), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["closing_id"], ["closings.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_closing_line_items_closing_id"), "closing_line_items", ["closing_id"], unique=False
    )
    op.create_index(
        op.f("ix_closing_line_items_ledger_entry_id"),
        "closing_line_items",
        ["ledger_entry_id"],
        unique=False,
    )

    op.create_table(
        "closed_entries",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("ledger_entry_id", sa.String(length=36), nullable=False),
        sa.Column("closing_id", sa.String(length=36), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["ledger_entry_id"], ["ledger_entries.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["closing_id"], ["closings.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ledger_entry_id"),
    )
    op.create_index(
        op.f("ix_closed_entries_closing_id"), "closed_entries", ["closing_id"], unique=False
    )

    invoice_sequences = op.create_table(
        "invoice_sequences",
        sa.Column("closing_type", sa.String(length=20), nullable=False),
        sa.Column("last_value", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("closing_type"),
    )
    op.bulk_insert(
        invoice_sequences,
        [
            {"closing_type": "salesperson", "last_value": 0},
            {"closing_type": "agency", "last_value": 0},
            {"closing_type": "operator", "last_value": 0},
        ],
    )

    op.create_table(
        "financial_entries",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("direction", sa.String(length=20), nullable=False),
        sa.Column("closing_id", sa.String(length=36), nullable=False),
        sa.Column("counterparty", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", _MONEY, nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["closing_id"], ["closings.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("closing_id"),
    )
    op.create_index(
        op.f("ix_financial_entries_direction"), "financial_entries", ["direction"], unique=False
    )

    op.create_table(
        "reversal_records",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("closing_id", sa.String(length=36), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("undone_by", sa.String(length=255), nullable=False),
        sa.Column(
            "undone_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.Column("items_reopened", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["closing_id"], ["closings.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_reversal_records_closing_id"), "reversal_records", ["closing_id"], unique=False
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("resource_type", sa.String(length=50), nullable=False),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("actor_type", sa.String(length=50), nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_logs_resource_type"), "audit_logs", ["resource_type"])
    op.create_index(op.f("ix_audit_logs_resource_id"), "audit_logs", ["resource_id"])
    op.create_index(op.f("ix_audit_logs_action"), "audit_logs", ["action"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("reversal_records")
    op.drop_table("financial_entries")
    op.drop_table("invoice_sequences")
    op.drop_table("closed_entries")
    op.drop_table("closing_line_items")
    op.drop_table("closings")
    op.drop_table("adjustment_requests")
    op.drop_table("ledger_entries")
