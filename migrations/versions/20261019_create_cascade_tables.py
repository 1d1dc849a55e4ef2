"""create cascade tables

Revision ID: 20261019_create_cascade_tables
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261019_create_cascade_tables"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _dimension_columns():
    return [
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("region_id", sa.Integer(), sa.ForeignKey("regions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sql_type_id", sa.Integer(), sa.ForeignKey("sql_types.id", ondelete="CASCADE"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    )

    for table in ("regions", "sql_types"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
            sa.Column("name", sa.String(100), nullable=False),
            sa.Column("display_name", sa.String(100), nullable=False),
            sa.Column("enabled", sa.Boolean(), server_default=sa.true(), nullable=False),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.UniqueConstraint("company_id", "name", name=f"uq_{table}_company_name"),
        )
        op.create_index(f"ix_{table}_company_id", table, ["company_id"])

    op.create_table(
        "sql_history",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        *_dimension_columns(),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.Integer(), nullable=False),
        sa.Column("volume", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.UniqueConstraint(
            "company_id", "region_id", "sql_type_id", "year", "quarter",
            name="uq_sql_history_dimension_quarter",
        ),
    )
    op.create_index("ix_sql_history_company_id", "sql_history", ["company_id"])

    op.create_table(
        "conversion_rates",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        *_dimension_columns(),
        sa.Column("opp_coverage_ratio", sa.Integer(), server_default="500", nullable=False),
        sa.Column("win_rate_new", sa.Integer(), server_default="2500", nullable=False),
        sa.Column("win_rate_upsell", sa.Integer(), server_default="3000", nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.UniqueConstraint("company_id", "region_id", "sql_type_id", name="uq_conversion_rates_dimension"),
    )
    op.create_index("ix_conversion_rates_company_id", "conversion_rates", ["company_id"])

    op.create_table(
        "deal_economics",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("region_id", sa.Integer(), sa.ForeignKey("regions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("acv_new", sa.BigInteger(), server_default="100000", nullable=False),
        sa.Column("acv_upsell", sa.BigInteger(), server_default="50000", nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.UniqueConstraint("company_id", "region_id", name="uq_deal_economics_region"),
    )
    op.create_index("ix_deal_economics_company_id", "deal_economics", ["company_id"])

    op.create_table(
        "time_distributions",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sql_type_id", sa.Integer(), sa.ForeignKey("sql_types.id", ondelete="CASCADE")),
        sa.Column("same_quarter_bp", sa.Integer(), server_default="8900", nullable=False),
        sa.Column("next_quarter_bp", sa.Integer(), server_default="1000", nullable=False),
        sa.Column("two_quarter_bp", sa.Integer(), server_default="100", nullable=False),
        sa.UniqueConstraint("company_id", "sql_type_id", name="uq_time_distributions_company_type"),
    )
    op.create_index("ix_time_distributions_company_id", "time_distributions", ["company_id"])

    op.create_table(
        "forecasts",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        *_dimension_columns(),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.Integer(), nullable=False),
        sa.Column("predicted_sqls", sa.Integer(), server_default="0", nullable=False),
        sa.Column("predicted_opps", sa.Integer(), server_default="0", nullable=False),
        sa.Column("predicted_revenue_new", sa.BigInteger(), server_default="0", nullable=False),
        sa.Column("predicted_revenue_upsell", sa.BigInteger(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.UniqueConstraint(
            "company_id", "region_id", "sql_type_id", "year", "quarter",
            name="uq_forecasts_dimension_quarter",
        ),
    )
    op.create_index("ix_forecasts_company_year_quarter", "forecasts", ["company_id", "year", "quarter"])

    op.create_table(
        "actuals",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        *_dimension_columns(),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.Integer(), nullable=False),
        sa.Column("actual_sqls", sa.Integer(), server_default="0", nullable=False),
        sa.Column("actual_opps", sa.Integer(), server_default="0", nullable=False),
        sa.Column("actual_revenue", sa.BigInteger(), server_default="0", nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.UniqueConstraint(
            "company_id", "region_id", "sql_type_id", "year", "quarter",
            name="uq_actuals_dimension_quarter",
        ),
    )
    op.create_index("ix_actuals_company_id", "actuals", ["company_id"])

    op.create_table(
        "scenarios",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("conversion_rate_multiplier_bp", sa.Integer(), server_default="10000", nullable=False),
        sa.Column("acv_new_adjustment", sa.Integer(), server_default="0", nullable=False),
        sa.Column("acv_upsell_adjustment", sa.Integer(), server_default="0", nullable=False),
        sa.Column("same_quarter_adjustment", sa.Integer(), server_default="0", nullable=False),
        sa.Column("next_quarter_adjustment", sa.Integer(), server_default="0", nullable=False),
        sa.Column("two_quarter_adjustment", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_revenue_change", sa.BigInteger(), server_default="0", nullable=False),
        sa.Column("total_revenue_change_pct_bp", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_opportunities_change", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_opportunities_change_pct_bp", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    )
    op.create_index("ix_scenarios_company_id", "scenarios", ["company_id"])


def downgrade() -> None:
    op.drop_index("ix_forecasts_company_year_quarter", table_name="forecasts")
    op.drop_table("forecasts")
    for table in (
        "scenarios",
        "actuals",
        "time_distributions",
        "deal_economics",
        "conversion_rates",
        "sql_history",
        "sql_types",
        "regions",
    ):
        op.drop_index(f"ix_{table}_company_id", table_name=table)
        op.drop_table(table)
    op.drop_table("companies")
