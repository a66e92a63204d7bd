"""create mcp_servers and pipeline_jobs tables

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "mcp_servers",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("version", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("spec", sa.JSON(), nullable=False),
        sa.Column("package_path", sa.Text(), nullable=True),
        sa.Column("docker_image", sa.Text(), nullable=True),
        sa.Column("claude_config", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_mcp_servers_name", "mcp_servers", ["name"], unique=True)
    op.create_index("idx_mcp_servers_created", "mcp_servers", ["created_at"])

    op.create_table(
        "pipeline_jobs",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
    )
    op.create_index("ix_pipeline_jobs_created_at", "pipeline_jobs", ["created_at"])

def downgrade():
    op.drop_index("ix_pipeline_jobs_created_at", table_name="pipeline_jobs")
    op.drop_table("pipeline_jobs")
    op.drop_index("idx_mcp_servers_created", table_name="mcp_servers")
    op.drop_index("ix_mcp_servers_name", table_name="mcp_servers")
    op.drop_table("mcp_servers")
