"""Tests for FastAPI endpoints."""

import httpx
from fastapi.testclient import TestClient

from competitions.api.dependencies import get_cache, get_client, get_competition_service
from competitions.clients.ratings import RatingsClient
from competitions.main import app, refresh_rate_limiter
from competitions.services.cache import CacheService
from competitions.services.competition_service import CompetitionService
from competitions.storage import MemoryRepository
from tests.helpers import TEAM_NAMES


# Create a synchronous test client
client = TestClient(app)

TWO_POOLS = {
    "id": "spring-open",
    "name": "Spring Open",
    "format": "pool-to-bracket",
    "pools": [
        {"id": "A", "name": "Pool A", "team_ids": ["t1", "t2", "t3", "t4"]},
        {"id": "B", "name": "Pool B", "team_ids": ["t5", "t6", "t7", "t8"]},
    ],
    "seeds": {f"t{i}": i for i in range(1, 9)},
}


def _ratings_transport():
    rows = [{"team": name, "rating": 2000 - 50 * i, "rank": i + 1}
            for i, name in enumerate(TEAM_NAMES.values())]
    return httpx.MockTransport(lambda request: httpx.Response(200, json=rows))


class ApiTestCase:
    """Wires the app to an in-memory service and a mocked rating source."""

    def setup_method(self):
        """Reset state before each test."""
        repository = MemoryRepository()
        for team_id, name in TEAM_NAMES.items():
            repository.save_team(team_id, name)
        self.service = CompetitionService(repository)
        self.cache = CacheService(ttl=60)
        self.ratings = RatingsClient(
            url="https://ratings.example/teams.json",
            cache=self.cache,
            transport=_ratings_transport(),
        )
        app.dependency_overrides[get_competition_service] = lambda: self.service
        app.dependency_overrides[get_client] = lambda: self.ratings
        app.dependency_overrides[get_cache] = lambda: self.cache
        refresh_rate_limiter.reset()

    def teardown_method(self):
        """Clean up after test."""
        app.dependency_overrides.clear()
        refresh_rate_limiter.reset()

    def create_two_pools(self):
        response = client.post("/api/competitions", json=TWO_POOLS)
        assert response.status_code == 201
        return response.json()

    def play_pools(self):
        """Schedule both pools; the lower-numbered team wins every game."""
        client.post("/api/competitions/spring-open/schedule")
        competition = client.get("/api/competitions/spring-open").json()
        for matchup in competition["pool_matchups"]:
            home_wins = matchup["home_team_id"] < matchup["away_team_id"]
            response = client.post("/api/competitions/spring-open/results", json={
                "matchup_id": matchup["id"],
                "kind": "pool",
                "home_score": 15 if home_wins else 8,
                "away_score": 8 if home_wins else 15,
            })
            assert response.status_code == 200


class TestHealth(ApiTestCase):
    """Tests for health check."""

    def test_health(self):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data


class TestCompetitionEndpoints(ApiTestCase):
    """Tests for competition CRUD."""

    def test_register_team(self):
        response = client.post("/api/teams", json={"id": "t9", "name": "Bravo"})

        assert response.status_code == 201
        assert self.service.repository.get_team_names(["t9"]) == {"t9": "Bravo"}

    def test_create(self):
        data = self.create_two_pools()

        assert data["format"] == "pool-to-bracket"
        assert data["team_ids"] == [f"t{i}" for i in range(1, 9)]

    def test_create_invalid_format(self):
        response = client.post("/api/competitions", json={"id": "x", "name": "X", "format": "swiss"})
        assert response.status_code == 422

    def test_list(self):
        self.create_two_pools()

        response = client.get("/api/competitions")

        assert response.status_code == 200
        assert response.json() == [
            {"id": "spring-open", "name": "Spring Open", "format": "pool-to-bracket", "leagueId": None}
        ]

    def test_get_missing(self):
        assert client.get("/api/competitions/nope").status_code == 404

    def test_delete(self):
        self.create_two_pools()

        assert client.delete("/api/competitions/spring-open").status_code == 200
        assert client.delete("/api/competitions/spring-open").status_code == 404


class TestPoolEndpoints(ApiTestCase):
    """Tests for scheduling, results and standings."""

    def test_schedule_pool(self):
        self.create_two_pools()

        response = client.post("/api/competitions/spring-open/pools/A/schedule")

        assert response.status_code == 200
        assert len(response.json()) == 6
        assert all(m["status"] == "scheduled" for m in response.json())

    def test_schedule_unknown_pool(self):
        self.create_two_pools()
        response = client.post("/api/competitions/spring-open/pools/Z/schedule")
        assert response.status_code == 409

    def test_schedule_missing_competition(self):
        response = client.post("/api/competitions/nope/pools/A/schedule")
        assert response.status_code == 404

    def test_standings_and_rankings(self):
        self.create_two_pools()
        self.play_pools()

        standings = client.get("/api/competitions/spring-open/standings").json()
        rankings = client.get("/api/competitions/spring-open/rankings").json()

        assert standings["A"]["t1"]["wins"] == 3
        assert standings["B"]["t8"]["losses"] == 3
        assert rankings == {"A": ["t1", "t2", "t3", "t4"], "B": ["t5", "t6", "t7", "t8"]}

    def test_reschedule_after_results(self):
        self.create_two_pools()
        self.play_pools()

        response = client.post("/api/competitions/spring-open/pools/A/schedule")
        assert response.status_code == 409

    def test_unknown_matchup(self):
        self.create_two_pools()
        response = client.post("/api/competitions/spring-open/results", json={
            "matchup_id": "A-99", "kind": "pool", "home_score": 1, "away_score": 0,
        })
        assert response.status_code == 404

    def test_negative_score_rejected(self):
        self.create_two_pools()
        client.post("/api/competitions/spring-open/pools/A/schedule")

        response = client.post("/api/competitions/spring-open/results", json={
            "matchup_id": "A-1", "kind": "pool", "home_score": -3, "away_score": 0,
        })
        assert response.status_code == 422

    def test_start_matchup(self):
        self.create_two_pools()
        client.post("/api/competitions/spring-open/pools/A/schedule")

        response = client.post("/api/competitions/spring-open/matchups/A-1/start")

        assert response.status_code == 200
        assert response.json()["status"] == "in_progress"
        assert client.post("/api/competitions/spring-open/matchups/A-1/start").status_code == 409


class TestBracketEndpoints(ApiTestCase):
    """Tests for bracket generation and play."""

    def test_generate_and_view(self):
        self.create_two_pools()
        self.play_pools()

        assert client.post("/api/competitions/spring-open/bracket").status_code == 200
        bracket = client.get("/api/competitions/spring-open/bracket").json()

        assert bracket["champion"] is None
        assert [r["name"] for r in bracket["rounds"]] == ["Semifinal", "Final"]
        semis = bracket["rounds"][0]["matchups"]
        assert (semis[0]["home_team_id"], semis[0]["away_team_id"]) == ("t1", "t6")
        assert semis[0]["home_seed"] == {"kind": "pool-seed", "pool": "A", "rank": 1}

    def test_play_to_champion(self):
        self.create_two_pools()
        self.play_pools()
        client.post("/api/competitions/spring-open/bracket")

        for matchup_id in ("bracket-r2-1", "bracket-r2-2", "bracket-r1-1"):
            response = client.post("/api/competitions/spring-open/results", json={
                "matchup_id": matchup_id, "kind": "bracket", "home_score": 15, "away_score": 12,
            })
            assert response.status_code == 200

        assert client.get("/api/competitions/spring-open/bracket").json()["champion"] == "t1"

    def test_bracket_tie_conflict(self):
        self.create_two_pools()
        self.play_pools()
        client.post("/api/competitions/spring-open/bracket")

        response = client.post("/api/competitions/spring-open/results", json={
            "matchup_id": "bracket-r2-1", "kind": "bracket", "home_score": 12, "away_score": 12,
        })
        assert response.status_code == 409

    def test_winner_change_after_final_conflict(self):
        self.create_two_pools()
        self.play_pools()
        client.post("/api/competitions/spring-open/bracket")
        for matchup_id in ("bracket-r2-1", "bracket-r2-2", "bracket-r1-1"):
            client.post("/api/competitions/spring-open/results", json={
                "matchup_id": matchup_id, "kind": "bracket", "home_score": 15, "away_score": 12,
            })

        response = client.post("/api/competitions/spring-open/results", json={
            "matchup_id": "bracket-r2-1", "kind": "bracket", "home_score": 10, "away_score": 15,
        })

        assert response.status_code == 409
        assert client.get("/api/competitions/spring-open/bracket").json()["champion"] == "t1"

    def test_pool_play_has_no_bracket(self):
        client.post("/api/competitions", json={
            "id": "rr", "name": "Round Robin", "format": "pool-play",
            "pools": [{"id": "A", "name": "Pool A", "team_ids": ["t1", "t2"]}],
        })

        assert client.post("/api/competitions/rr/bracket").status_code == 409
        assert client.get("/api/competitions/rr/bracket").status_code == 409


class TestSummaryEndpoint(ApiTestCase):
    """Tests for the results summary."""

    def test_summary(self):
        self.create_two_pools()
        self.play_pools()

        response = client.get("/api/competitions/spring-open/summary")

        assert response.status_code == 200
        data = response.json()
        assert data["rankings"]["A"][0] == "t1"
        assert data["ratings"]["t1"]["pre_rating"] == 2000
        assert data["ratings"]["t1"]["projected"] is not None
        assert data["storylines"]["group_of_death"]["pool_id"] == "A"
        assert data["storylines"]["narrative"].startswith("8 teams across 2 pools played 12 games.")

    def test_summary_without_rating_source(self):
        self.ratings.url = ""
        self.create_two_pools()

        data = client.get("/api/competitions/spring-open/summary").json()

        assert data["ratings"]["t1"]["pre_rating"] is None

    def test_summary_missing(self):
        assert client.get("/api/competitions/nope/summary").status_code == 404


class TestLeagueEndpoints(ApiTestCase):
    """Tests for league standings."""

    def test_league_standings(self):
        client.post("/api/competitions", json=dict(TWO_POOLS, league_id="club"))
        self.play_pools()
        response = client.post("/api/leagues", json={
            "id": "club",
            "name": "Club Season",
            "team_ids": ["t1", "t2"],
            "games": [{"id": "g1", "home_team_id": "t2", "away_team_id": "t1",
                       "home_score": 15, "away_score": 14}],
        })
        assert response.status_code == 201

        data = client.get("/api/leagues/club/standings").json()

        assert data["standings"]["t1"]["regular_losses"] == 1
        assert data["standings"]["t1"]["tournament_wins"] == 3
        assert data["ranking"] == ["t1", "t2"]

    def test_invalid_league(self):
        assert client.post("/api/leagues", json={"name": "No id"}).status_code == 422

    def test_missing_league(self):
        assert client.get("/api/leagues/nope/standings").status_code == 404


class TestRatingsEndpoints(ApiTestCase):
    """Tests for rating refresh and cache stats."""

    def test_refresh_then_rate_limited(self):
        first = client.post("/api/ratings/refresh").json()
        second = client.post("/api/ratings/refresh").json()

        assert first == {"status": "refreshed", "message": "Loaded 8 team ratings", "teams": 8}
        assert second["status"] == "rate_limited"
        assert second["retry_after"] > 0

    def test_cache_stats(self):
        client.post("/api/ratings/refresh")

        stats = client.get("/api/cache/stats").json()

        assert stats["ratings"]["size"] == 1
        assert stats["ratings"]["ttl"] == 60
