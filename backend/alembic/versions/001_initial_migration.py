"""Initial migration: team, roster_member, match, availability, lineup, set_score tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "team",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("league_format", sa.String(), nullable=False, server_default="USTA"),
        sa.Column("rating_limit", sa.Float(), nullable=True),
        sa.Column("total_lines", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "roster_member",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("ntrp_rating", sa.Float(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"]),
    )
    op.create_index("ix_roster_member_team_id", "roster_member", ["team_id"])

    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("opponent_name", sa.String(), nullable=False),
        sa.Column("match_date", sa.Date(), nullable=False),
        sa.Column("is_home", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("league_format", sa.String(), nullable=False, server_default="USTA"),
        sa.Column("rating_cap", sa.Float(), nullable=True),
        sa.Column("court_count", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("match_result", sa.String(), nullable=True),
        sa.Column("score_summary", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"]),
    )
    op.create_index("ix_match_team_id", "match", ["team_id"])

    op.create_table(
        "availability",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("roster_member_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["match_id"], ["match.id"]),
        sa.ForeignKeyConstraint(["roster_member_id"], ["roster_member.id"]),
        sa.UniqueConstraint("match_id", "roster_member_id", name="uq_availability_match_member"),
    )
    op.create_index("ix_availability_match_id", "availability", ["match_id"])

    op.create_table(
        "lineup",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("court_number", sa.Integer(), nullable=False),
        sa.Column("seat_a_id", sa.Integer(), nullable=True),
        sa.Column("seat_b_id", sa.Integer(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["match_id"], ["match.id"]),
        sa.ForeignKeyConstraint(["seat_a_id"], ["roster_member.id"]),
        sa.ForeignKeyConstraint(["seat_b_id"], ["roster_member.id"]),
        sa.UniqueConstraint("match_id", "court_number", name="uq_lineup_match_court"),
    )
    op.create_index("ix_lineup_match_id", "lineup", ["match_id"])

    # One row per recorded set; CUP lineups carry a single set of total games
    op.create_table(
        "set_score",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("lineup_id", sa.Integer(), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("home_games", sa.Integer(), nullable=False),
        sa.Column("away_games", sa.Integer(), nullable=False),
        sa.Column("tiebreak", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["lineup_id"], ["lineup.id"]),
        sa.UniqueConstraint("lineup_id", "set_number", name="uq_set_score_lineup_set"),
    )
    op.create_index("ix_set_score_lineup_id", "set_score", ["lineup_id"])


def downgrade() -> None:
    op.drop_index("ix_set_score_lineup_id", table_name="set_score")
    op.drop_table("set_score")
    op.drop_index("ix_lineup_match_id", table_name="lineup")
    op.drop_table("lineup")
    op.drop_index("ix_availability_match_id", table_name="availability")
    op.drop_table("availability")
    op.drop_index("ix_match_team_id", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_roster_member_team_id", table_name="roster_member")
    op.drop_table("roster_member")
    op.drop_table("team")
