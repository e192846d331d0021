"""create users and complaints tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 12:00:00

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None

# Enum columns store member names, matching SQLAlchemy's Enum(enum_class) default
user_role = sa.Enum("STUDENT", "ADMIN", name="userrole")
complaint_category = sa.Enum(
    "ELECTRICITY", "WATER", "MAINTENANCE", "CLEANLINESS", "STAFF", name="complaintcategory"
)
complaint_status = sa.Enum("PENDING", "IN_PROGRESS", "RESOLVED", "CANCELLED", name="complaintstatus")
complaint_urgency = sa.Enum("HIGH", "MEDIUM", "LOW", name="complainturgency")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("student_id", sa.String(length=50), nullable=True),
        sa.Column("room", sa.String(length=50), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("last_login", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "complaints",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("user_name", sa.String(length=255), nullable=False),
        sa.Column("user_room", sa.String(length=50), nullable=False),
        sa.Column("category", complaint_category, nullable=False),
        sa.Column("urgency", complaint_urgency, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("status", complaint_status, nullable=False),
        sa.Column("admin_notes", sa.Text(), nullable=False),
        sa.Column("image_data", sa.Text(), nullable=True),
        sa.Column("ai_analysis_text", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_complaints_id", "complaints", ["id"])
    op.create_index("ix_complaints_user_id", "complaints", ["user_id"])
    op.create_index("ix_complaints_urgency", "complaints", ["urgency"])
    op.create_index("ix_complaints_status", "complaints", ["status"])
    op.create_index("ix_complaints_created_at", "complaints", ["created_at"])


def downgrade():
    op.drop_table("complaints")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (complaint_urgency, complaint_status, complaint_category, user_role):
        enum_type.drop(bind, checkfirst=True)
