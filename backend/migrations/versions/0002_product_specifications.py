"""Add product specifications and widen photos for multi-MB payloads

Revision ID: 0002_product_specifications
Revises: 0001_initial_schema
Create Date: 2026-10-05 09:30:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision = "0002_product_specifications"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    columns = {col["name"] for col in sa.inspect(bind).get_columns("products")}

    with op.batch_alter_table("products", schema=None) as batch_op:
        if "specifications" not in columns:
            batch_op.add_column(sa.Column("specifications", sa.Text(), nullable=True))
        if bind.dialect.name == "mysql":
            batch_op.alter_column(
                "photos",
                existing_type=sa.Text(),
                type_=mysql.LONGTEXT(),
                existing_nullable=True,
            )


def downgrade():
    bind = op.get_bind()
    with op.batch_alter_table("products", schema=None) as batch_op:
        if bind.dialect.name == "mysql":
            batch_op.alter_column(
                "photos",
                existing_type=mysql.LONGTEXT(),
                type_=sa.Text(),
                existing_nullable=True,
            )
        batch_op.drop_column("specifications")
