"""
HTTP tests for saved simulations: create, list, fetch, vote.
"""
import pytest
from sqlmodel import select

from app.models.simulation import Simulation
from app.models.vote import Vote
from app.services import simulation_service
from app.services.simulation_service import DuplicateVoteError, SimulationNotFoundError, SimulationValidationError
from app.services.tournament_registry import GROUPS

THIRD_E_TO_L = ["civ", "playoff-4-slot", "irn", "ksa", "playoff-2-slot", "aut", "uzb", "gha"]


def _payload(champion="ger", **overrides):
    payload = {
        "name": "Mi quiniela",
        "playoffSelections": [{"playoffId": "playoff-3", "selectedTeamId": "ita"}],
        "groupPredictions": [{"groupId": g.id, "orderedTeamIds": list(g.teams)} for g in GROUPS],
        "advancingThirdPlaceTeams": THIRD_E_TO_L,
        "knockoutPredictions": [
            {"matchId": "M104", "homeTeamId": "ger", "awayTeamId": "bra", "winnerTeamId": champion},
        ],
        "championTeamId": champion,
    }
    payload.update(overrides)
    return payload


def _create(client, **kwargs):
    response = client.post("/api/simulations", json=_payload(**kwargs))
    assert response.status_code == 201, response.text
    return response.json()


def test_create_simulation(client, session):
    created = _create(client)

    assert created["championTeamId"] == "ger"
    assert created["votesCount"] == 0
    assert created["name"] == "Mi quiniela"
    assert len(created["data"]["groupPredictions"]) == 12
    assert created["data"]["groupPredictions"][0]["groupId"] == "A"
    assert created["data"]["advancingThirdPlaceTeams"] == THIRD_E_TO_L
    assert created["data"]["playoffSelections"][0]["selectedTeamId"] == "ita"

    stored = session.get(Simulation, created["id"])
    assert stored is not None
    assert stored.data["knockoutPredictions"][0]["winnerTeamId"] == "ger"


@pytest.mark.parametrize(
    "overrides, detail",
    [
        ({"championTeamId": None}, "Missing required fields"),
        ({"knockoutPredictions": []}, "Missing required fields"),
        ({"groupPredictions": [{"groupId": "A", "orderedTeamIds": ["mex"]}]}, "Invalid group predictions"),
        ({"advancingThirdPlaceTeams": THIRD_E_TO_L[:7]}, "Invalid third place teams"),
    ],
)
def test_create_simulation_validation(client, overrides, detail):
    payload = _payload()
    payload.update(overrides)

    response = client.post("/api/simulations", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == detail


def test_get_simulation(client):
    created = _create(client)

    response = client.get(f"/api/simulations/{created['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]

    assert client.get("/api/simulations/does-not-exist").status_code == 404


def test_vote_counts_once_per_user(client, session):
    created = _create(client)
    url = f"/api/simulations/{created['id']}/vote"

    response = client.post(url, headers={"X-User-Id": "user-1"})
    assert response.status_code == 200
    assert response.json() == {"simulationId": created["id"], "votesCount": 1}

    assert client.post(url, headers={"X-User-Id": "user-1"}).status_code == 409
    assert client.post(url, headers={"X-User-Id": "user-2"}).json()["votesCount"] == 2

    votes = session.exec(select(Vote).where(Vote.simulation_id == created["id"])).all()
    assert len(votes) == 2


def test_vote_requires_user_header(client):
    created = _create(client)

    response = client.post(f"/api/simulations/{created['id']}/vote")

    assert response.status_code == 401


def test_vote_unknown_simulation(client):
    response = client.post("/api/simulations/nope/vote", headers={"X-User-Id": "user-1"})
    assert response.status_code == 404


def test_list_sorted_by_votes(client):
    first = _create(client, champion="ger")
    second = _create(client, champion="bra")
    third = _create(client, champion="ger")
    for user in ("u1", "u2"):
        client.post(f"/api/simulations/{second['id']}/vote", headers={"X-User-Id": user})
    client.post(f"/api/simulations/{third['id']}/vote", headers={"X-User-Id": "u1"})

    ids = [s["id"] for s in client.get("/api/simulations").json()]

    assert ids == [second["id"], third["id"], first["id"]]


def test_list_recent_and_champion_filter(client):
    first = _create(client, champion="ger")
    second = _create(client, champion="bra")
    client.post(f"/api/simulations/{first['id']}/vote", headers={"X-User-Id": "u1"})

    recent = client.get("/api/simulations", params={"sort": "recent"}).json()
    assert [s["id"] for s in recent] == [second["id"], first["id"]]

    only_bra = client.get("/api/simulations", params={"champion": "bra"}).json()
    assert [s["id"] for s in only_bra] == [second["id"]]


def test_list_limit_is_clamped(client):
    for _ in range(3):
        _create(client)

    assert len(client.get("/api/simulations", params={"limit": 2}).json()) == 2
    # 0 is raised to 1, anything above the cap is lowered to it
    assert len(client.get("/api/simulations", params={"limit": 0}).json()) == 1
    assert len(client.get("/api/simulations", params={"limit": 1000}).json()) == 3


# ============================================================================
# Service layer
# ============================================================================


def _create_direct(session, champion="ger"):
    payload = _payload(champion=champion)
    return simulation_service.create_simulation(
        session,
        group_predictions=payload["groupPredictions"],
        advancing_third_place_teams=payload["advancingThirdPlaceTeams"],
        knockout_predictions=payload["knockoutPredictions"],
        champion_team_id=payload["championTeamId"],
    )


def test_service_create_and_vote(session):
    simulation = _create_direct(session)

    assert simulation.votes_count == 0
    assert simulation.data["playoffSelections"] == []
    assert simulation_service.add_vote(session, simulation.id, "u1") == 1
    with pytest.raises(DuplicateVoteError):
        simulation_service.add_vote(session, simulation.id, "u1")
    assert simulation_service.get_simulation(session, simulation.id).votes_count == 1


def test_service_errors(session):
    with pytest.raises(SimulationNotFoundError):
        simulation_service.get_simulation(session, "missing")
    with pytest.raises(SimulationValidationError):
        simulation_service.create_simulation(
            session,
            group_predictions=None,
            advancing_third_place_teams=THIRD_E_TO_L,
            knockout_predictions=[{}],
            champion_team_id="ger",
        )
