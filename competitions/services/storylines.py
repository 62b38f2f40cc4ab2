"""
Storyline generation.

Turns completed matchups, seeds and rating snapshots into structured
findings and a narrative paragraph. Each finding is None when no data
qualifies; the narrative is assembled in a fixed order so the same results
always read the same way.
"""

import logging
from typing import Mapping, Optional

from competitions import config
from competitions.models.competition import Bracket, PoolToBracket, pools_of
from competitions.models.matchup import Matchup
from competitions.models.rating import RatingSnapshot
from competitions.models.standings import StandingsRecord
from competitions.models.storyline import GameStory, PoolStory, Storylines, TeamStory
from competitions.services.standings import compute_standings

logger = logging.getLogger(__name__)

UNSEEDED = 999


def _game_story(matchup: Matchup, gap: Optional[float] = None) -> GameStory:
    winner = matchup.winner_id()
    loser = matchup.loser_id()
    return GameStory(
        matchup_id=matchup.id,
        winner_id=winner if winner else matchup.home_team_id,
        loser_id=loser if loser else matchup.away_team_id,
        winner_score=max(matchup.home_score, matchup.away_score),
        loser_score=min(matchup.home_score, matchup.away_score),
        margin=matchup.margin(),
        gap=gap,
    )


def biggest_seed_upset(matchups: list[Matchup], seeds: Mapping[str, int]) -> Optional[GameStory]:
    best, best_gap = None, 0
    for matchup in matchups:
        winner, loser = matchup.winner_id(), matchup.loser_id()
        if winner not in seeds or loser not in seeds:
            continue
        gap = seeds[winner] - seeds[loser]
        if gap > best_gap:
            best, best_gap = matchup, gap
    return _game_story(best, best_gap) if best else None


def biggest_rating_upset(
    matchups: list[Matchup], ratings: Mapping[str, Optional[float]]
) -> Optional[GameStory]:
    best, best_gap = None, 0.0
    for matchup in matchups:
        winner, loser = matchup.winner_id(), matchup.loser_id()
        winner_rating, loser_rating = ratings.get(winner), ratings.get(loser)
        if winner_rating is None or loser_rating is None:
            continue
        gap = loser_rating - winner_rating
        if gap > best_gap:
            best, best_gap = matchup, gap
    return _game_story(best, best_gap) if best else None


def closest_game(matchups: list[Matchup]) -> Optional[GameStory]:
    if not matchups:
        return None
    return _game_story(min(matchups, key=lambda m: m.margin()))


def biggest_blowout(matchups: list[Matchup]) -> Optional[GameStory]:
    if not matchups:
        return None
    return _game_story(max(matchups, key=lambda m: m.margin()))


def _team_story(team_id, record: StandingsRecord, seed, rating, score) -> TeamStory:
    return TeamStory(
        team_id=team_id,
        wins=record.wins,
        losses=record.losses,
        ties=record.ties,
        point_diff=record.point_diff,
        seed=seed,
        rating=rating,
        score=score,
    )


def cinderella_team(
    records: Mapping[str, StandingsRecord],
    seeds: Mapping[str, int],
    ratings: Mapping[str, Optional[float]],
) -> Optional[TeamStory]:
    """Winning team with the weakest seed or rating.

    A team with neither a seed nor a rating scores as the weakest seed.
    """
    best, best_score = None, None
    for team_id, record in records.items():
        if record.games_played == 0 or record.win_fraction < 0.5:
            continue
        seed, rating = seeds.get(team_id), ratings.get(team_id)
        score = (seed if seed is not None else UNSEEDED) * 100 - (rating or 0)
        if best_score is None or score > best_score:
            best = _team_story(team_id, record, seed, rating, score)
            best_score = score
    return best


def group_of_death(pools, ratings: Mapping[str, Optional[float]]) -> Optional[PoolStory]:
    if len(pools) <= 1:
        return None
    best = None
    for pool in pools:
        known = [ratings[t] for t in pool.team_ids if ratings.get(t) is not None]
        if len(known) < 2:
            continue
        average = sum(known) / len(known)
        if best is None or average > best.average_rating:
            best = PoolStory(
                pool_id=pool.id,
                pool_name=pool.name,
                average_rating=average,
                rated_teams=len(known),
            )
    return best


def dominant_team(records: Mapping[str, StandingsRecord]) -> Optional[TeamStory]:
    best, best_score = None, None
    for team_id, record in records.items():
        if record.games_played < 2:
            continue
        score = record.wins * 100 + record.point_diff
        if best_score is None or score > best_score:
            best = _team_story(team_id, record, None, None, score)
            best_score = score
    return best


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class _Narrator:
    def __init__(self, team_names: Mapping[str, str]):
        self.team_names = team_names

    def name(self, team_id: Optional[str]) -> str:
        if team_id is None:
            return "TBD"
        return self.team_names.get(team_id, team_id)

    def score(self, story: GameStory) -> str:
        return f"{story.winner_score}-{story.loser_score}"


def build_storylines(
    competition,
    team_names: Mapping[str, str],
    snapshots: Optional[Mapping[str, RatingSnapshot]] = None,
) -> Storylines:
    """Findings and narrative for a competition's results so far."""
    snapshots = snapshots or {}
    ratings = {team_id: snapshot.pre_rating for team_id, snapshot in snapshots.items()}
    seeds = competition.seeds
    pools = pools_of(competition)
    completed = competition.completed_matchups()
    records = compute_standings(completed, competition.team_ids)

    stories = Storylines(
        upset_by_seed=biggest_seed_upset(completed, seeds),
        upset_by_rating=biggest_rating_upset(completed, ratings),
        closest_game=closest_game(completed),
        biggest_blowout=biggest_blowout(completed),
        cinderella=cinderella_team(records, seeds, ratings),
        group_of_death=group_of_death(pools, ratings),
        dominant=dominant_team(records),
    )
    stories.narrative = _narrate(competition, stories, completed, len(pools), _Narrator(team_names))
    return stories


def _narrate(competition, stories: Storylines, completed, pool_count, narrator) -> str:
    lines = []

    opening = _plural(len(competition.team_ids), "team")
    if pool_count:
        opening += f" across {_plural(pool_count, 'pool')}"
    lines.append(f"{opening} played {_plural(len(completed), 'game')}.")

    if isinstance(competition, (Bracket, PoolToBracket)):
        final = competition.final
        if final is not None and final.is_completed and final.winner_id():
            lines.append(
                f"{narrator.name(final.winner_id())} won the championship, beating "
                f"{narrator.name(final.loser_id())} {max(final.home_score, final.away_score)}-"
                f"{min(final.home_score, final.away_score)} in the final."
            )

    dominant = stories.dominant
    if dominant:
        lines.append(
            f"{narrator.name(dominant.team_id)} was the most dominant team, going "
            f"{dominant.wins}-{dominant.losses} with a {dominant.point_diff:+d} point differential."
        )

    seeds = competition.seeds
    if stories.upset_by_seed:
        upset = stories.upset_by_seed
        lines.append(
            f"Biggest upset: #{seeds[upset.winner_id]} seed {narrator.name(upset.winner_id)} "
            f"beat #{seeds[upset.loser_id]} seed {narrator.name(upset.loser_id)} "
            f"{narrator.score(upset)}."
        )
    elif stories.upset_by_rating:
        upset = stories.upset_by_rating
        lines.append(
            f"Biggest upset: {narrator.name(upset.winner_id)} beat "
            f"{narrator.name(upset.loser_id)} {narrator.score(upset)}, "
            f"overcoming a {upset.gap:.0f}-point rating gap."
        )

    cinderella = stories.cinderella
    if cinderella:
        described = []
        if cinderella.seed is not None:
            described.append(f"#{cinderella.seed} seed")
        if cinderella.rating is not None:
            described.append(f"rated {cinderella.rating:.0f}")
        if described:
            lines.append(
                f"Cinderella story: {narrator.name(cinderella.team_id)} "
                f"({', '.join(described)}) finished {cinderella.wins}-{cinderella.losses}."
            )

    closest = stories.closest_game
    if closest and closest.margin <= config.CLOSE_GAME_MARGIN:
        lines.append(
            f"Closest game: {narrator.name(closest.winner_id)} "
            f"{narrator.score(closest)} {narrator.name(closest.loser_id)}."
        )

    if stories.group_of_death:
        group = stories.group_of_death
        lines.append(
            f"Group of death: {group.pool_name}, averaging a "
            f"{group.average_rating:.0f} rating."
        )

    if completed:
        total = sum(m.home_score + m.away_score for m in completed) / len(completed)
        margin = sum(m.margin() for m in completed) / len(completed)
        lines.append(
            f"Games averaged {total:.1f} total points with a "
            f"{margin:.1f}-point average margin."
        )

    return " ".join(lines)
