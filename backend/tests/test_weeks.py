import pytest

from golf_league.config import API_PREFIX, LeagueFormat, get_league_format

API = f"{API_PREFIX}/v0"


async def _team_with_players(client, team_name, *player_names):
    ids = []
    for name in player_names:
        resp = await client.post(f"{API}/players", json={"name": name})
        assert resp.status_code == 201
        ids.append(resp.json()["id"])
    tid = (await client.post(f"{API}/teams", json={"name": team_name})).json()["id"]
    resp = await client.put(f"{API}/teams/{tid}/roster", json={"playerIds": ids})
    assert resp.status_code == 200
    return tid, ids


@pytest.fixture
async def league(client, app):
    app.dependency_overrides[get_league_format] = lambda: LeagueFormat(holes_per_round=3)
    eagles, a = await _team_with_players(client, "Eagles", "A1", "A2", "A3", "A4")
    birdies, b = await _team_with_players(client, "Birdies", "B1", "B2", "B3", "B4")
    return {"eagles": eagles, "birdies": birdies, "a": a, "b": b}


def _matchup_body(league):
    a, b = league["a"], league["b"]
    return {
        "matchups": [
            {
                "index": 0,
                "teamAId": league["eagles"],
                "teamBId": league["birdies"],
                "subMatches": [
                    {"slot": 0, "sideA": a[:2], "sideB": b[:2]},
                    {"slot": 1, "sideA": a[2:], "sideB": b[2:]},
                ],
            }
        ]
    }


def _scores_body(league):
    a, b = league["a"], league["b"]
    return {
        "players": [
            {"playerId": a[0], "gross": {"1": 3, "2": 3, "3": 3}},
            {"playerId": b[0], "gross": {"1": 4, "2": 4, "3": 4}},
            {"playerId": a[2], "gross": {"1": 5, "2": 4, "3": 4}},
            {"playerId": b[2], "gross": {"1": 4, "2": 4, "3": 5}, "strokes": {"1": "full"}},
        ]
    }


@pytest.mark.anyio
async def test_scores_are_validated_and_stored(client, league):
    pid = league["a"][0]
    resp = await client.put(
        f"{API}/weeks/1/scores",
        json={
            "players": [
                {
                    "playerId": pid,
                    "gross": {"1": 4, "2": "5", "3": ""},
                    "strokes": {"1": "half", "2": "none"},
                }
            ]
        },
    )
    assert resp.status_code == 200
    stored = resp.json()["players"][0]
    assert stored["gross"] == {"1": 4, "2": 5}
    assert stored["strokes"] == {"1": "half"}

    # Corrections replace the previous record.
    resp = await client.put(
        f"{API}/weeks/1/scores",
        json={"players": [{"playerId": pid, "gross": {"1": 3}}]},
    )
    assert resp.json()["players"][0]["gross"] == {"1": 3}

    resp = await client.get(f"{API}/weeks/1/scores")
    assert resp.json()["weekNumber"] == 1
    assert len(resp.json()["players"]) == 1
    assert (await client.get(f"{API}/weeks/2/scores")).json()["players"] == []


@pytest.mark.anyio
@pytest.mark.parametrize(
    "entry",
    [
        {"gross": {"4": 5}},
        {"gross": {"1": 0}},
        {"gross": {"1": "x"}},
        {"strokes": {"1": "double"}},
    ],
    ids=["hole-out-of-range", "zero", "non-numeric", "bad-stroke"],
)
async def test_invalid_scores_are_rejected(client, league, entry):
    body = {"players": [{"playerId": league["a"][0], **entry}]}
    resp = await client.put(f"{API}/weeks/1/scores", json=body)
    assert resp.status_code == 400
    assert resp.json()["code"] == "scores_invalid"


@pytest.mark.anyio
@pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN"])
async def test_non_finite_scores_are_rejected(client, league, literal):
    pid = league["a"][0]
    body = '{"players": [{"playerId": "%s", "gross": {"1": %s}}]}' % (pid, literal)
    resp = await client.put(
        f"{API}/weeks/1/scores",
        content=body,
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "scores_invalid"
    assert (await client.get(f"{API}/weeks/1/scores")).json()["players"] == []


@pytest.mark.anyio
async def test_scores_for_unknown_player_or_week_zero(client, league):
    resp = await client.put(
        f"{API}/weeks/1/scores",
        json={"players": [{"playerId": "ghost", "gross": {"1": 4}}]},
    )
    assert resp.status_code == 400
    assert "ghost" in resp.json()["detail"]

    resp = await client.get(f"{API}/weeks/0/scores")
    assert resp.status_code == 422

    pid = league["a"][0]
    resp = await client.put(
        f"{API}/weeks/1/scores",
        json={"players": [{"playerId": pid}, {"playerId": pid}]},
    )
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_matchups_round_trip_and_replace(client, league):
    resp = await client.put(f"{API}/weeks/1/matchups", json=_matchup_body(league))
    assert resp.status_code == 200
    matchup = resp.json()["matchups"][0]
    assert matchup["teamAId"] == league["eagles"]
    assert [s["slot"] for s in matchup["subMatches"]] == [0, 1]

    swapped = _matchup_body(league)
    swapped["matchups"][0]["subMatches"] = [
        {"slot": 0, "sideA": league["a"][2:], "sideB": league["b"][:2]}
    ]
    resp = await client.put(f"{API}/weeks/1/matchups", json=swapped)
    assert resp.status_code == 200

    resp = await client.get(f"{API}/weeks/1/matchups")
    subs = resp.json()["matchups"][0]["subMatches"]
    assert len(subs) == 1
    assert subs[0]["sideA"] == league["a"][2:]


@pytest.mark.anyio
async def test_invalid_matchups_are_rejected(client, league):
    body = _matchup_body(league)
    body["matchups"][0]["subMatches"][0]["sideA"] = [league["a"][0], league["b"][3]]
    resp = await client.put(f"{API}/weeks/1/matchups", json=body)
    assert resp.status_code == 400
    assert resp.json()["code"] == "matchups_invalid"

    body = _matchup_body(league)
    body["matchups"][0]["teamBId"] = league["eagles"]
    resp = await client.put(f"{API}/weeks/1/matchups", json=body)
    assert resp.status_code == 400

    assert (await client.get(f"{API}/weeks/1/matchups")).json()["matchups"] == []


@pytest.mark.anyio
async def test_week_results(client, league):
    await client.put(f"{API}/weeks/1/matchups", json=_matchup_body(league))
    await client.put(f"{API}/weeks/1/scores", json=_scores_body(league))

    resp = await client.get(f"{API}/weeks/1/results")
    assert resp.status_code == 200
    (matchup,) = resp.json()["matchups"]

    first, second = matchup["subMatches"]
    assert first["result"] == "side_a"
    assert first["finalLabel"] == "2&1"
    assert first["decidedOn"] == 2
    assert [h["status"] for h in first["holes"]] == ["1 up", "2 up"]

    # B3 gets a full stroke on hole 1 (net 3) and wins it; then halved; A3 wins 3.
    assert second["result"] == "tie"
    assert second["finalLabel"] == "AS"
    assert [h["winner"] for h in second["holes"]] == ["B", "halved", "A"]
    assert second["holes"][0]["netB"] == 3
    assert [h["status"] for h in second["holes"]] == ["1 dn", "1 dn", "AS"]
    assert (matchup["teamAPoints"], matchup["teamBPoints"]) == (3, 1)


@pytest.mark.anyio
async def test_results_for_unplayed_week(client, league):
    resp = await client.get(f"{API}/weeks/5/results")
    assert resp.status_code == 200
    assert resp.json() == {"weekNumber": 5, "matchups": []}

    await client.put(f"{API}/weeks/5/matchups", json=_matchup_body(league))
    (matchup,) = (await client.get(f"{API}/weeks/5/results")).json()["matchups"]
    assert (matchup["teamAPoints"], matchup["teamBPoints"]) == (0, 0)
    assert {s["result"] for s in matchup["subMatches"]} == {"incomplete"}
    assert {s["finalLabel"] for s in matchup["subMatches"]} == {"-"}


@pytest.mark.anyio
async def test_captain_lineups(client, league):
    eagles = league["eagles"]
    resp = await client.put(
        f"{API}/weeks/2/lineups/{eagles}", json={"playerIds": league["a"]}
    )
    assert resp.status_code == 200
    assert resp.json()["playerIds"] == league["a"]

    resp = await client.put(
        f"{API}/weeks/2/lineups/{eagles}", json={"playerIds": league["a"][:3]}
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "lineup_invalid"
    assert "exactly 4 players" in resp.json()["detail"]

    resp = await client.put(
        f"{API}/weeks/2/lineups/{eagles}",
        json={"playerIds": league["a"][:3] + league["b"][:1]},
    )
    assert resp.status_code == 400

    resp = await client.put(
        f"{API}/weeks/2/lineups/nobody", json={"playerIds": league["a"]}
    )
    assert resp.status_code == 404

    lineups = (await client.get(f"{API}/weeks/2/lineups")).json()
    assert [row["teamId"] for row in lineups] == [eagles]

    assert (await client.delete(f"{API}/weeks/2/lineups")).status_code == 204
    assert (await client.get(f"{API}/weeks/2/lineups")).json() == []
