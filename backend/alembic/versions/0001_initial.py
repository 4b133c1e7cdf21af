"""League schema: teams, players, weekly rounds, matchups and lineups"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "team",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("captain_id", sa.String(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index(
        "uq_team_name_lower", "team", [sa.text("lower(name)")], unique=True
    )
    op.create_table(
        "player",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("team_id", sa.String(), sa.ForeignKey("team.id"), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()
        ),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "player_round",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("gross", sa.JSON(), nullable=False),
        sa.Column("strokes", sa.JSON(), nullable=False),
        sa.Column(
            "updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint(
            "week_number", "player_id", name="uq_player_round_week_player"
        ),
    )
    op.create_table(
        "matchup",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("matchup_index", sa.Integer(), nullable=False),
        sa.Column("team_a_id", sa.String(), sa.ForeignKey("team.id"), nullable=False),
        sa.Column("team_b_id", sa.String(), sa.ForeignKey("team.id"), nullable=False),
        sa.UniqueConstraint("week_number", "matchup_index", name="uq_matchup_week_index"),
    )
    op.create_table(
        "sub_match",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "matchup_id",
            sa.String(),
            sa.ForeignKey("matchup.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("slot", sa.Integer(), nullable=False),
        sa.Column("side_a_player_ids", sa.JSON(), nullable=False),
        sa.Column("side_b_player_ids", sa.JSON(), nullable=False),
        sa.UniqueConstraint("matchup_id", "slot", name="uq_sub_match_matchup_slot"),
    )
    op.create_table(
        "team_lineup",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.String(), sa.ForeignKey("team.id"), nullable=False),
        sa.Column("player_ids", sa.JSON(), nullable=False),
        sa.Column(
            "submitted_at", sa.DateTime(), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint("week_number", "team_id", name="uq_team_lineup_week_team"),
    )


def downgrade():
    op.drop_table("team_lineup")
    op.drop_table("sub_match")
    op.drop_table("matchup")
    op.drop_table("player_round")
    op.drop_table("player")
    op.drop_index("uq_team_name_lower", table_name="team")
    op.drop_table("team")
