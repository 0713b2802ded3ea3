"""
HTTP tests for reference data, the stateless bracket endpoints and the draft
wizard endpoints.
"""
from app.services.tournament_registry import GROUPS

THIRD_E_TO_L = ["civ", "playoff-4-slot", "irn", "ksa", "playoff-2-slot", "aut", "uzb", "gha"]


def _group_payload():
    return [{"groupId": g.id, "orderedTeamIds": list(g.teams)} for g in GROUPS]


def _by_id(predictions):
    return {p["matchId"]: p for p in predictions}


# ============================================================================
# Reference data
# ============================================================================


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_teams(client):
    teams = client.get("/api/teams").json()
    by_id = {t["id"]: t for t in teams}

    assert by_id["mex"]["groupId"] == "A"
    assert by_id["playoff-1-slot"]["isPlayoffSlot"] is True
    assert "ita" in by_id

    drawn = client.get("/api/teams", params={"include_candidates": "false"}).json()
    assert len(drawn) == 48


def test_groups_and_playoffs(client):
    groups = client.get("/api/groups").json()
    assert [g["id"] for g in groups] == list("ABCDEFGHIJKL")

    assert client.get("/api/groups/c").json()["teams"] == ["bra", "mar", "hai", "sco"]
    assert client.get("/api/groups/Z").status_code == 404

    playoffs = client.get("/api/playoffs").json()
    assert len(playoffs) == 6
    assert playoffs[0]["slotTeamId"] == "playoff-1-slot"


def test_knockout_slots(client):
    slots = client.get("/api/knockout/slots").json()
    by_id = {s["id"]: s for s in slots}

    assert len(slots) == 32
    assert by_id["M74"]["awaySource"] == {
        "kind": "thirdPlace",
        "groupId": None,
        "matchId": None,
        "anchor": "1E",
        "possibleGroups": ["A", "B", "C", "D", "F"],
    }
    assert by_id["M103"]["homeSource"]["kind"] == "loserOf"
    assert by_id["M104"]["stageName"] == "Final"


# ============================================================================
# Bracket engine
# ============================================================================


def test_initialize_bracket(client):
    response = client.post(
        "/api/bracket/initialize",
        json={"groupPredictions": _group_payload(), "advancingThirdPlaceTeams": THIRD_E_TO_L},
    )

    assert response.status_code == 200
    data = response.json()
    by_id = _by_id(data["knockoutPredictions"])
    assert len(by_id) == 16
    assert by_id["M79"]["homeTeamId"] == "mex"
    assert by_id["M79"]["awayTeamId"] == "civ"
    assert data["completedCount"] == 0
    assert data["isComplete"] is False
    assert data["championTeamId"] is None


def test_initialize_accepts_snake_case(client):
    response = client.post(
        "/api/bracket/initialize",
        json={
            "group_predictions": [{"group_id": g.id, "ordered_team_ids": list(g.teams)} for g in GROUPS],
            "advancing_third_place_teams": THIRD_E_TO_L,
        },
    )

    assert response.status_code == 200
    assert len(response.json()["knockoutPredictions"]) == 16


def test_initialize_requires_fields(client):
    response = client.post("/api/bracket/initialize", json={"groupPredictions": _group_payload()})
    assert response.status_code == 422


def test_winner_then_reconcile(client):
    base = {"groupPredictions": _group_payload(), "advancingThirdPlaceTeams": THIRD_E_TO_L}
    predictions = client.post("/api/bracket/initialize", json=base).json()["knockoutPredictions"]

    for match_id, winner in (("M74", "ger"), ("M77", "fra")):
        response = client.post(
            "/api/bracket/winner",
            json={**base, "knockoutPredictions": predictions, "matchId": match_id, "winnerTeamId": winner},
        )
        assert response.status_code == 200
        predictions = response.json()["knockoutPredictions"]

    by_id = _by_id(predictions)
    assert by_id["M89"]["homeTeamId"] == "ger"
    assert by_id["M89"]["awayTeamId"] == "fra"
    assert response.json()["completedCount"] == 2

    reconciled = client.post("/api/bracket/reconcile", json={**base, "knockoutPredictions": predictions}).json()
    assert len(reconciled["knockoutPredictions"]) == 32
    assert _by_id(reconciled["knockoutPredictions"])["M74"]["winnerTeamId"] == "ger"


def test_summary(client):
    predictions = [
        {"matchId": "M101", "homeTeamId": "ger", "awayTeamId": "bra", "winnerTeamId": "ger"},
        {"matchId": "M102", "homeTeamId": "arg", "awayTeamId": "fra", "winnerTeamId": "fra"},
        {"matchId": "M104", "homeTeamId": "ger", "awayTeamId": "fra", "winnerTeamId": "fra"},
    ]

    data = client.post("/api/bracket/summary", json={"knockoutPredictions": predictions}).json()

    assert data == {
        "isComplete": False,
        "completedCount": 3,
        "championTeamId": "fra",
        "semiFinalists": ["ger", "bra", "arg", "fra"],
    }


def test_third_place_lookup(client):
    data = client.post("/api/bracket/third-place", json={"advancingGroups": list("LKJIHGFE")}).json()

    assert data["option"] == 1
    assert data["missingGroups"] == ["A", "B", "C", "D"]
    assert data["assignments"]["1A"] == "3E"
    assert data["assignments"]["1E"] == "3F"


def test_third_place_lookup_needs_eight_groups(client):
    data = client.post("/api/bracket/third-place", json={"advancingGroups": list("EFGHIJK")}).json()
    assert data == {"option": None, "missingGroups": None, "assignments": None}


# ============================================================================
# Draft wizard
# ============================================================================


def test_draft_flow(client):
    data = client.get("/api/draft").json()
    draft = data["draft"]
    assert draft["step"] == 0
    assert data["stepComplete"] == [True, True, False, False]

    draft = client.post(
        "/api/draft/playoff", json={"draft": draft, "playoffId": "playoff-3", "selectedTeamId": "ita"}
    ).json()["draft"]
    assert draft["playoffSelections"][2]["selectedTeamId"] == "ita"

    for team_id in THIRD_E_TO_L:
        draft = client.post("/api/draft/third-place/toggle", json={"draft": draft, "teamId": team_id}).json()["draft"]
    assert len(draft["advancingThirdPlaceTeams"]) == 8

    data = client.post("/api/draft/step", json={"draft": draft, "step": 3}).json()
    draft = data["draft"]
    assert len(draft["knockoutPredictions"]) == 16
    assert data["stepComplete"][2] is True

    data = client.post(
        "/api/draft/knockout/winner", json={"draft": draft, "matchId": "M79", "winnerTeamId": "civ"}
    ).json()
    assert _by_id(data["draft"]["knockoutPredictions"])["M79"]["winnerTeamId"] == "civ"


def test_draft_group_order_and_bad_step(client):
    draft = client.get("/api/draft").json()["draft"]

    draft = client.post(
        "/api/draft/group",
        json={"draft": draft, "groupId": "A", "orderedTeamIds": ["kor", "mex", "rsa", "playoff-6-slot"]},
    ).json()["draft"]
    assert draft["groupPredictions"][0]["orderedTeamIds"][0] == "kor"

    response = client.post("/api/draft/step", json={"draft": draft, "step": 7})
    assert response.status_code == 422
