from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001_countries"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "countries",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("capital", sa.String(length=128)),
        sa.Column("region", sa.String(length=64)),
        sa.Column("population", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("currency_code", sa.String(length=8)),
        sa.Column("exchange_rate", sa.Numeric(24, 10)),
        sa.Column("estimated_gdp", sa.Numeric(30, 2)),
        sa.Column("flag_url", sa.String(length=255)),
        sa.Column("last_refreshed_at", sa.DateTime(timezone=True)),
    )
    op.create_index("uq_countries_name_lower", "countries", [sa.text("lower(name)")], unique=True)
    op.create_index("ix_countries_region_lower", "countries", [sa.text("lower(region)")])

    op.create_table(
        "refresh_status",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("total_countries", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_refreshed_at", sa.DateTime(timezone=True)),
    )
    op.execute("INSERT INTO refresh_status (id, total_countries) VALUES (1, 0)")


def downgrade() -> None:
    op.drop_table("refresh_status")
    op.drop_index("ix_countries_region_lower", table_name="countries")
    op.drop_index("uq_countries_name_lower", table_name="countries")
    op.drop_table("countries")
