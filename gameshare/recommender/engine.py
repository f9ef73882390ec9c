# gameshare/recommender/engine.py
"""
Tag-affinity recommendations.

A user's likes, comments and play sessions are turned into a normalized
per-tag affinity map; every game the user has not interacted with is scored
by summing the affinities of its tags. When there is no signal, or too few
candidates, results are filled from a popularity ranking and finally from a
creation-date ordering. Nothing here writes to the store.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from ..config import RECOMMENDATION_DEFAULT_LIMIT
from ..schemas import GameOut, RecommendationRequest, RecommendationResult
from ..services.store import GameStore

logger = logging.getLogger(__name__)

LIKE_WEIGHT = 3
COMMENT_WEIGHT = 2
PLAYTIME_WEIGHT = 1  # multiplied by the playtime normalized against the user's max

MIN_RECOMMENDATIONS = 5
FLOOR_SCORE = 0.1

LIKES_RANK_WEIGHT = 2
PLAYS_RANK_WEIGHT = 1


@dataclass
class Interactions:
    liked: list = field(default_factory=list)
    commented: list = field(default_factory=list)
    played: list = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.liked or self.commented or self.played)

    @property
    def interacted_ids(self) -> Set[int]:
        ids = {r.game_id for r in self.liked}
        ids.update(r.game_id for r in self.commented)
        ids.update(r.game_id for r in self.played)
        return ids


@dataclass
class ScoredGame:
    game: object
    score: float
    matched: bool = True  # shares at least one tag with the affinity map


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        limit = RECOMMENDATION_DEFAULT_LIMIT
    return max(int(limit), 1)


# ---------------------------------------------------------
# 1) Interaction aggregation
# ---------------------------------------------------------
def aggregate_interactions(store: GameStore, user_id: int) -> Interactions:
    # Three independent reads on the request session
    interactions = Interactions(
        liked=store.find_liked(user_id),
        commented=store.find_commented(user_id),
        played=store.find_played(user_id),
    )
    logger.info(
        "user %s - liked: %d, commented: %d, play sessions: %d",
        user_id,
        len(interactions.liked),
        len(interactions.commented),
        len(interactions.played),
    )
    return interactions


# ---------------------------------------------------------
# 2) Tag affinity
# ---------------------------------------------------------
def _add(acc: Dict[int, float], tag_ids: Iterable[int], weight: float) -> None:
    for tag_id in tag_ids:
        acc[tag_id] = acc.get(tag_id, 0.0) + weight


def compute_tag_affinity(interactions: Interactions) -> Dict[int, float]:
    """
    Weighted tag counts, normalized to sum to 1.

    A game that is both liked and commented (or played) contributes once per
    signal; overlapping signals reinforce each other and are not deduplicated.
    An empty map means no signal at all.
    """
    affinity: Dict[int, float] = {}

    for like in interactions.liked:
        _add(affinity, like.game.tag_ids, LIKE_WEIGHT)

    for comment in interactions.commented:
        _add(affinity, comment.game.tag_ids, COMMENT_WEIGHT)

    max_play_time = max((p.play_time or 0 for p in interactions.played), default=0)
    for play in interactions.played:
        if max_play_time == 0:
            normalized = 1.0
        else:
            normalized = (play.play_time or 0) / max_play_time
        _add(affinity, play.game.tag_ids, PLAYTIME_WEIGHT * normalized)

    total = sum(affinity.values())
    if total > 0:
        for tag_id in affinity:
            affinity[tag_id] /= total

    logger.debug("tag affinities: %s", affinity)
    return affinity


# ---------------------------------------------------------
# 3) Candidate scoring
# ---------------------------------------------------------
def score_game(affinity: Dict[int, float], game) -> float:
    tag_ids = game.tag_ids
    if not tag_ids:
        return FLOOR_SCORE
    score = sum(affinity.get(tag_id, 0.0) for tag_id in tag_ids)
    # no overlapping tag: still eligible, but below any matched game
    return score if score > 0 else FLOOR_SCORE


def matches(affinity: Dict[int, float], game) -> bool:
    return any(affinity.get(tag_id, 0.0) > 0 for tag_id in game.tag_ids)


def score_candidates(affinity: Dict[int, float], candidates: Iterable) -> List[ScoredGame]:
    return [
        ScoredGame(game=g, score=score_game(affinity, g), matched=matches(affinity, g))
        for g in candidates
    ]


def rank(scored: List[ScoredGame], limit: int) -> list:
    # floor-scored games always sort after tag-matched ones
    ordered = sorted(scored, key=lambda s: (s.matched, s.score), reverse=True)
    return [s.game for s in ordered[: clamp_limit(limit)]]


# ---------------------------------------------------------
# 4) Fallbacks
# ---------------------------------------------------------
def popularity_ranking(store: GameStore, limit: int, exclude: Iterable[int] = ()) -> list:
    """
    Merge the top 2*limit games by likes and by play sessions.

    Rank i of N in the likes list is worth (N - i) * 2, rank i of M in the
    play list (M - i) * 1; a game in both lists gets the sum.
    """
    limit = clamp_limit(limit)
    by_likes = store.find_top_by_likes(2 * limit)
    by_plays = store.find_top_by_play_count(2 * limit)

    scores: Dict[int, float] = {}
    games: Dict[int, object] = {}
    for i, g in enumerate(by_likes):
        scores[g.id] = scores.get(g.id, 0) + (len(by_likes) - i) * LIKES_RANK_WEIGHT
        games[g.id] = g
    for i, g in enumerate(by_plays):
        scores[g.id] = scores.get(g.id, 0) + (len(by_plays) - i) * PLAYS_RANK_WEIGHT
        games.setdefault(g.id, g)

    skip = set(exclude)
    ordered = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    return [games[gid] for gid, _ in ordered if gid not in skip][:limit]


def recency_fill(store: GameStore, limit: int, seen: Set[int], total_games: int) -> list:
    """
    Last resort: games by creation date, skipping `seen`.

    Newest first when the catalog is large compared to `limit`, oldest first
    otherwise. Not a random sample: same data, same order.
    """
    if limit <= 0:
        return []
    order = "desc" if total_games > 2 * limit else "asc"
    try:
        rows = store.find_by_creation(order, limit + len(seen))
    except Exception:
        logger.exception("recency fallback failed")
        return []
    return [g for g in rows if g.id not in seen][:limit]


# ---------------------------------------------------------
# Service
# ---------------------------------------------------------
class RecommendationService:
    def __init__(self, store: GameStore):
        self.store = store

    def get_recommendations(self, user_id: int, limit: Optional[int] = None) -> list:
        limit = clamp_limit(limit)
        logger.info("generating recommendations for user %s (limit=%d)", user_id, limit)

        total_games = self.store.count_games()
        if total_games == 0:
            logger.info("catalog is empty, nothing to recommend")
            return []

        interactions = aggregate_interactions(self.store, user_id)
        excluded = interactions.interacted_ids

        if interactions.is_empty:
            logger.info("user %s has no interactions, using popularity", user_id)
            return self._fill([], limit, excluded, total_games)

        affinity = compute_tag_affinity(interactions)
        candidates = self.store.find_games_excluding(excluded)
        logger.info("found %d candidate games for user %s", len(candidates), user_id)
        if not candidates:
            return self._fill([], limit, excluded, total_games)

        picked = rank(score_candidates(affinity, candidates), limit)
        if len(picked) < min(MIN_RECOMMENDATIONS, limit):
            picked = self._fill(picked, limit, excluded, total_games)

        logger.info("returning %d recommendations for user %s", len(picked), user_id)
        return picked

    def recommend(self, request: RecommendationRequest) -> RecommendationResult:
        games = self.get_recommendations(request.user_id, request.limit)
        return RecommendationResult(games=[GameOut.model_validate(g) for g in games])

    def _fill(self, chosen: list, limit: int, excluded: Set[int], total_games: int) -> list:
        result = list(chosen)
        seen = set(excluded) | {g.id for g in result}

        try:
            popular = popularity_ranking(self.store, limit, exclude=seen)
        except Exception:
            logger.exception("popularity fallback failed, falling back to recency")
            popular = []

        for g in popular:
            if len(result) >= limit:
                break
            result.append(g)
            seen.add(g.id)

        if len(result) < limit:
            extra = recency_fill(self.store, limit, seen, total_games)
            result.extend(extra[: limit - len(result)])
        return result


def recommend_for_user(db: Session, user_id: int, limit: Optional[int] = None) -> RecommendationResult:
    request = RecommendationRequest(user_id=user_id, limit=limit)
    return RecommendationService(GameStore(db)).recommend(request)
