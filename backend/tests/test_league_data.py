from types import SimpleNamespace

import pytest

from golf_league.services.league_data import (
    build_weeks,
    load_season,
    snapshot_options,
    to_matchup_lineup,
)


def _matchup(week, index, team_a, team_b, subs=()):
    return SimpleNamespace(
        week_number=week,
        matchup_index=index,
        team_a_id=team_a,
        team_b_id=team_b,
        sub_matches=[
            SimpleNamespace(slot=slot, side_a_player_ids=a, side_b_player_ids=b)
            for slot, a, b in subs
        ],
    )


def _round(week, player, gross, strokes=None):
    return SimpleNamespace(week_number=week, player_id=player, gross=gross, strokes=strokes)


def test_to_matchup_lineup_orders_slots_and_drops_blank_ids():
    row = _matchup(1, 0, "t1", "t2", [(1, ["a3", "a4"], ["b3", "b4"]), (0, ["a1", ""], None)])
    lineup = to_matchup_lineup(row)
    assert [s.slot for s in lineup.sub_matches] == [0, 1]
    assert lineup.sub_matches[0].side_a == ("a1",)
    assert lineup.sub_matches[0].side_b == ()
    assert lineup.sub_matches[1].side_b == ("b3", "b4")


def test_build_weeks_groups_rows_by_week():
    weeks = build_weeks(
        [_matchup(2, 1, "t3", "t4"), _matchup(2, 0, "t1", "t2"), _matchup(1, 0, "t1", "t3")],
        [_round(2, "a1", {"1": 4}, {"1": "half"}), _round(3, "a1", None)],
    )
    assert [w.week_number for w in weeks] == [1, 2, 3]
    assert [m.index for m in weeks[1].matchups] == [0, 1]
    assert weeks[1].gross_scores == {"a1": {"1": 4}}
    assert weeks[1].stroke_allocations == {"a1": {"1": "half"}}
    assert weeks[0].gross_scores == {}
    assert weeks[2].matchups == ()
    assert weeks[2].gross_scores == {"a1": {}}


def _session(dialect, in_transaction=False):
    bind = SimpleNamespace(dialect=SimpleNamespace(name=dialect))
    return SimpleNamespace(
        get_bind=lambda: bind, in_transaction=lambda: in_transaction
    )


def test_season_reads_share_one_snapshot_on_postgres():
    assert snapshot_options(_session("postgresql")) == {
        "isolation_level": "REPEATABLE READ"
    }
    assert snapshot_options(_session("sqlite")) == {}
    # An open transaction keeps whatever isolation it started with.
    assert snapshot_options(_session("postgresql", in_transaction=True)) == {}


@pytest.mark.anyio
async def test_load_season_pins_isolation_before_reading(monkeypatch):
    calls = []

    class _Session:
        def in_transaction(self):
            return False

        def get_bind(self):
            return SimpleNamespace(dialect=SimpleNamespace(name="postgresql"))

        async def connection(self, execution_options=None):
            calls.append(("connection", execution_options))

    async def _teams(session):
        calls.append(("teams", None))
        return []

    async def _weeks(session):
        calls.append(("weeks", None))
        return []

    monkeypatch.setattr("golf_league.services.league_data.load_teams", _teams)
    monkeypatch.setattr("golf_league.services.league_data.load_weeks", _weeks)

    assert await load_season(_Session()) == ([], [])
    assert calls == [
        ("connection", {"isolation_level": "REPEATABLE READ"}),
        ("teams", None),
        ("weeks", None),
    ]


@pytest.mark.anyio
async def test_load_season_on_sqlite(league_db):
    async with league_db.AsyncSessionLocal() as session:
        assert await load_season(session) == ([], [])
