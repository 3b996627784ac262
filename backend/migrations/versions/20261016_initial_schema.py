"""Initial SalesDash schema

Revision ID: 20261016_initial
Revises:
Create Date: 2026-10-16
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261016_initial"
down_revision = None
branch_labels = None
depends_on = None


def _lifecycle_columns():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_by", sa.Integer(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.Integer(), nullable=True),
        sa.Column("last_action", sa.String(16), nullable=True),
    ]


def upgrade():
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(64), nullable=True),
        sa.Column("last_name", sa.String(64), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="customer"),
        sa.Column("date_format", sa.String(16), nullable=False, server_default="MM/DD/YYYY"),
        sa.Column("dark_mode", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_profiles_email"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=False)

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_reason", sa.String(255), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("session_tokens", schema=None) as batch_op:
        batch_op.create_index("ix_session_tokens_token_hash", ["token_hash"], unique=True)
        batch_op.create_index("ix_session_tokens_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_session_tokens_expires_at", ["expires_at"], unique=False)
        batch_op.create_index("ix_session_tokens_is_revoked", ["is_revoked"], unique=False)
        batch_op.create_index("ix_session_tokens_user_active", ["user_id", "is_revoked"], unique=False)

    op.create_table(
        "user_permissions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("can_add_customers", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("can_edit_customers", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("can_delete_customers", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("can_add_sales", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("can_edit_sales", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("can_delete_sales", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("can_add_salesdetails", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("can_edit_salesdetails", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("can_delete_salesdetails", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", name="uq_user_permissions_user"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_user_permissions_user_id", "user_permissions", ["user_id"], unique=False)

    op.create_table(
        "customer",
        sa.Column("custno", sa.String(10), nullable=False),
        sa.Column("custname", sa.String(20), nullable=True),
        sa.Column("address", sa.String(50), nullable=True),
        sa.Column("payterm", sa.String(3), nullable=True),
        *_lifecycle_columns(),
        sa.PrimaryKeyConstraint("custno"),
    )
    op.create_index("ix_customer_deleted_at", "customer", ["deleted_at"], unique=False)

    op.create_table(
        "employee",
        sa.Column("empno", sa.String(10), nullable=False),
        sa.Column("firstname", sa.String(64), nullable=True),
        sa.Column("lastname", sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint("empno"),
    )

    op.create_table(
        "product",
        sa.Column("prodcode", sa.String(10), nullable=False),
        sa.Column("description", sa.String(100), nullable=True),
        sa.Column("unit", sa.String(10), nullable=True),
        sa.PrimaryKeyConstraint("prodcode"),
    )

    op.create_table(
        "pricehist",
        sa.Column("prodcode", sa.String(10), nullable=False),
        sa.Column("effdate", sa.Date(), nullable=False),
        sa.Column("unitprice_cents", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["prodcode"], ["product.prodcode"]),
        sa.PrimaryKeyConstraint("prodcode", "effdate"),
    )
    op.create_index("ix_pricehist_prodcode_effdate", "pricehist", ["prodcode", "effdate"], unique=False)

    op.create_table(
        "sales",
        sa.Column("transno", sa.String(10), nullable=False),
        sa.Column("salesdate", sa.Date(), nullable=True),
        sa.Column("custno", sa.String(10), nullable=True),
        sa.Column("empno", sa.String(10), nullable=True),
        *_lifecycle_columns(),
        sa.ForeignKeyConstraint(["custno"], ["customer.custno"]),
        sa.ForeignKeyConstraint(["empno"], ["employee.empno"]),
        sa.PrimaryKeyConstraint("transno"),
    )
    with op.batch_alter_table("sales", schema=None) as batch_op:
        batch_op.create_index("ix_sales_custno", ["custno"], unique=False)
        batch_op.create_index("ix_sales_deleted_at", ["deleted_at"], unique=False)

    op.create_table(
        "salesdetail",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("transno", sa.String(10), nullable=False),
        sa.Column("prodcode", sa.String(10), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        *_lifecycle_columns(),
        sa.ForeignKeyConstraint(["transno"], ["sales.transno"]),
        sa.ForeignKeyConstraint(["prodcode"], ["product.prodcode"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("salesdetail", schema=None) as batch_op:
        batch_op.create_index("ix_salesdetail_transno", ["transno"], unique=False)
        batch_op.create_index("ix_salesdetail_deleted_at", ["deleted_at"], unique=False)

    op.create_table(
        "payment",
        sa.Column("orno", sa.String(10), nullable=False),
        sa.Column("transno", sa.String(10), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("paydate", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["transno"], ["sales.transno"]),
        sa.PrimaryKeyConstraint("orno"),
    )
    op.create_index("ix_payment_transno", "payment", ["transno"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("notifications", schema=None) as batch_op:
        batch_op.create_index("ix_notifications_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_notifications_created_at", ["created_at"], unique=False)
        batch_op.create_index("ix_notifications_user_read", ["user_id", "is_read"], unique=False)

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(16), nullable=False),
        sa.Column("table_name", sa.String(64), nullable=False),
        sa.Column("record_id", sa.String(64), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("activity_logs", schema=None) as batch_op:
        batch_op.create_index("ix_activity_logs_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_activity_logs_action", ["action"], unique=False)
        batch_op.create_index("ix_activity_logs_created_at", ["created_at"], unique=False)
        batch_op.create_index("ix_activity_logs_table_record", ["table_name", "record_id"], unique=False)


def downgrade():
    op.drop_table("activity_logs")
    op.drop_table("notifications")
    op.drop_table("payment")
    op.drop_table("salesdetail")
    op.drop_table("sales")
    op.drop_table("pricehist")
    op.drop_table("product")
    op.drop_table("employee")
    op.drop_table("customer")
    op.drop_table("user_permissions")
    op.drop_table("session_tokens")
    op.drop_table("profiles")
