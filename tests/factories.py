"""Shared squad, pool and league builders for the test suite.

The default squad has a main squad of four and a bench of two::

    p1 batsman      captain       joined 20, role at 60, now 100  -> 120
    p2 bowler       vice-captain  joined 0,  role at 0,  now 80   -> 120
    p3 allrounder   x-factor      joined 10, role at 30, now 50   -> 45
    p4 wicketkeeper               joined 10,             now 30   -> 20
    p5 batsman      (bench)       joined 40,             now 40
    p6 bowler       (bench)       joined 25,             now 25

for a total of 305 with nothing banked.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pyleague.config.league import LeagueSettings
from pyleague.models.player import PlayerPool
from pyleague.models.squad import Squad


SQUAD_SIZE = 4
BASE_TOTAL = 305.0

WINDOW_START = datetime(2025, 2, 1, tzinfo=timezone.utc)
WINDOW_END = datetime(2025, 2, 28, tzinfo=timezone.utc)
IN_WINDOW = datetime(2025, 2, 10, 12, 0, tzinfo=timezone.utc)


def squad_payload(**overrides) -> dict:
    payload = {
        "id": "sq1",
        "leagueId": "lg1",
        "userId": "u1",
        "squadName": "Deccan Dashers",
        "players": [
            {"playerId": "p1", "playerName": "Arjun", "role": "batsman", "points": 100,
             "pointsAtJoining": 20, "pointsWhenRoleAssigned": 60},
            {"playerId": "p2", "playerName": "Bilal", "role": "bowler", "points": 80,
             "pointsAtJoining": 0, "pointsWhenRoleAssigned": 0},
            {"playerId": "p3", "playerName": "Chris", "role": "allrounder", "points": 50,
             "pointsAtJoining": 10, "pointsWhenRoleAssigned": 30},
            {"playerId": "p4", "playerName": "Dinesh", "role": "wicketkeeper", "points": 30,
             "pointsAtJoining": 10},
            {"playerId": "p5", "playerName": "Eoin", "role": "batsman", "points": 40, "pointsAtJoining": 40},
            {"playerId": "p6", "playerName": "Faf", "role": "bowler", "points": 25, "pointsAtJoining": 25},
        ],
        "captainId": "p1",
        "viceCaptainId": "p2",
        "xFactorId": "p3",
    }
    payload.update(overrides)
    return payload


def make_squad(**overrides) -> Squad:
    return Squad.model_validate(squad_payload(**overrides))


def make_pool(**points: float) -> PlayerPool:
    players = [
        {"playerId": "p1", "name": "Arjun", "role": "batsman", "points": 100},
        {"playerId": "p2", "name": "Bilal", "role": "bowler", "points": 80},
        {"playerId": "p3", "name": "Chris", "role": "allrounder", "points": 50},
        {"playerId": "p4", "name": "Dinesh", "role": "wicketkeeper", "points": 30},
        {"playerId": "p5", "name": "Eoin", "role": "batsman", "points": 40},
        {"playerId": "p6", "name": "Faf", "role": "bowler", "points": 25},
        {"playerId": "p7", "name": "Gautam", "role": "batsman", "points": 60},
        {"playerId": "p8", "name": "Hasan", "role": "bowler", "points": 35},
    ]
    for player in players:
        if player["playerId"] in points:
            player["points"] = points[player["playerId"]]
    return PlayerPool.model_validate({"id": "pool1", "name": "Winter Series", "players": players})


def make_settings(**overrides) -> LeagueSettings:
    payload = {
        "id": "lg1",
        "name": "Office League",
        "squadSize": SQUAD_SIZE,
        "playerPoolId": "pool1",
        "transferTypes": {
            "benchTransfers": {"enabled": True, "maxAllowed": 2, "benchSlots": 2},
            "flexibleTransfers": {"enabled": True, "maxAllowed": 1},
            "midSeasonTransfers": {
                "enabled": True,
                "maxAllowed": 1,
                "windowStartDate": WINDOW_START.isoformat(),
                "windowEndDate": WINDOW_END.isoformat(),
            },
        },
    }
    payload.update(overrides)
    return LeagueSettings.model_validate(payload)
