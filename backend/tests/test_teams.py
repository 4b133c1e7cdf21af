import pytest

from golf_league.config import API_PREFIX, LeagueFormat, get_league_format

API = f"{API_PREFIX}/v0"


async def _signup(client, *names):
    ids = []
    for name in names:
        resp = await client.post(f"{API}/players", json={"name": name})
        assert resp.status_code == 201
        ids.append(resp.json()["id"])
    return ids


@pytest.mark.anyio
async def test_team_crud(client):
    resp = await client.post(f"{API}/teams", json={"name": "Eagles"})
    assert resp.status_code == 201
    tid = resp.json()["id"]
    assert resp.json()["players"] == []

    resp = await client.patch(f"{API}/teams/{tid}", json={"name": "Albatrosses"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Albatrosses"

    resp = await client.get(f"{API}/teams")
    assert [t["name"] for t in resp.json()] == ["Albatrosses"]

    assert (await client.delete(f"{API}/teams/{tid}")).status_code == 204
    resp = await client.get(f"{API}/teams/{tid}")
    assert resp.status_code == 404
    assert resp.json()["code"] == "team_not_found"


@pytest.mark.anyio
async def test_team_names_are_unique_ignoring_case(client):
    assert (await client.post(f"{API}/teams", json={"name": "Eagles"})).status_code == 201
    resp = await client.post(f"{API}/teams", json={"name": "eagles"})
    assert resp.status_code == 409
    assert resp.json()["code"] == "team_exists"

    other = (await client.post(f"{API}/teams", json={"name": "Birdies"})).json()["id"]
    resp = await client.patch(f"{API}/teams/{other}", json={"name": "EAGLES"})
    assert resp.status_code == 409


@pytest.mark.anyio
async def test_roster_replace_and_captain(client):
    a, b, c = await _signup(client, "Ada", "Bea", "Cal")
    tid = (await client.post(f"{API}/teams", json={"name": "Eagles"})).json()["id"]

    resp = await client.put(f"{API}/teams/{tid}/roster", json={"playerIds": [a, b]})
    assert resp.status_code == 200
    assert {p["id"] for p in resp.json()["players"]} == {a, b}

    resp = await client.patch(f"{API}/teams/{tid}", json={"captainId": c})
    assert resp.status_code == 400
    assert resp.json()["code"] == "captain_not_on_roster"

    resp = await client.patch(f"{API}/teams/{tid}", json={"captainId": b})
    assert resp.json()["captainId"] == b

    # Dropping the captain from the roster clears the captaincy.
    resp = await client.put(f"{API}/teams/{tid}/roster", json={"playerIds": [a, c]})
    assert resp.status_code == 200
    assert resp.json()["captainId"] is None
    assert {p["id"] for p in resp.json()["players"]} == {a, c}
    assert (await client.get(f"{API}/players/{b}")).json()["teamId"] is None


@pytest.mark.anyio
async def test_roster_rules(client, app):
    app.dependency_overrides[get_league_format] = lambda: LeagueFormat(roster_size=2)
    a, b, c = await _signup(client, "Ada", "Bea", "Cal")
    t1 = (await client.post(f"{API}/teams", json={"name": "Eagles"})).json()["id"]
    t2 = (await client.post(f"{API}/teams", json={"name": "Birdies"})).json()["id"]

    resp = await client.put(f"{API}/teams/{t1}/roster", json={"playerIds": [a, b, c]})
    assert resp.status_code == 400
    assert resp.json()["code"] == "roster_full"

    resp = await client.put(f"{API}/teams/{t1}/roster", json={"playerIds": [a, a]})
    assert resp.json()["code"] == "roster_invalid"

    resp = await client.put(f"{API}/teams/{t1}/roster", json={"playerIds": ["nobody"]})
    assert resp.status_code == 400
    assert resp.json()["code"] == "roster_invalid"

    assert (
        await client.put(f"{API}/teams/{t1}/roster", json={"playerIds": [a]})
    ).status_code == 200
    resp = await client.put(f"{API}/teams/{t2}/roster", json={"playerIds": [a, b]})
    assert resp.status_code == 409
    assert resp.json()["code"] == "player_on_other_team"


@pytest.mark.anyio
async def test_default_teams_created_once(client, app):
    app.dependency_overrides[get_league_format] = lambda: LeagueFormat(team_count=4)

    resp = await client.post(f"{API}/teams/defaults")
    assert resp.status_code == 201
    assert [t["name"] for t in resp.json()] == ["Team 1", "Team 2", "Team 3", "Team 4"]

    resp = await client.post(f"{API}/teams/defaults")
    assert resp.status_code == 409
    assert resp.json()["code"] == "teams_exist"


@pytest.mark.anyio
async def test_auto_assign_fills_rosters_in_signup_order(client, app):
    app.dependency_overrides[get_league_format] = lambda: LeagueFormat(
        team_count=2, roster_size=2
    )
    await client.post(f"{API}/teams/defaults")
    ids = await _signup(client, "Ada", "Bea", "Cal", "Dee", "Eve")

    resp = await client.post(f"{API}/teams/auto-assign")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["assigned"]) == 4
    team1, team2 = body["teams"]
    assert [p["id"] for p in team1["players"]] == ids[:2]
    assert [p["id"] for p in team2["players"]] == ids[2:4]
    assert team1["captainId"] == ids[0]
    assert team2["captainId"] == ids[2]

    leftover = (await client.get(f"{API}/players", params={"unassigned": "true"})).json()
    assert [p["id"] for p in leftover] == [ids[4]]


@pytest.mark.anyio
async def test_team_with_matchups_cannot_be_deleted(client):
    t1 = (await client.post(f"{API}/teams", json={"name": "Eagles"})).json()["id"]
    t2 = (await client.post(f"{API}/teams", json={"name": "Birdies"})).json()["id"]
    resp = await client.put(
        f"{API}/weeks/1/matchups",
        json={"matchups": [{"index": 0, "teamAId": t1, "teamBId": t2}]},
    )
    assert resp.status_code == 200

    resp = await client.delete(f"{API}/teams/{t1}")
    assert resp.status_code == 409
    assert resp.json()["code"] == "team_has_matchups"
