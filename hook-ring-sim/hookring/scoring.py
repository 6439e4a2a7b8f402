"""Scoring engine — points, games, sets and the match.

Rules:
- A game goes to TARGET points, win by two, no point ceiling
- Each won game is a set; sets persist for the whole match
- The loser of a game serves first in the next one
- The match goes to the first player with best_of // 2 + 1 sets
"""

from typing import Optional

from hookring.types import Score
from hookring import config as cfg


def win_by_two(a: int, b: int, target: int) -> bool:
    """True when the leader has reached ``target`` and leads by at least two."""
    hi, lo = max(a, b), min(a, b)
    return hi >= target and hi - lo >= 2


def sets_to_win(best_of: int) -> int:
    return best_of // 2 + 1


def game_winner(score: Score, target: int = cfg.TARGET) -> Optional[int]:
    if not win_by_two(score.p1_points, score.p2_points, target):
        return None
    return 1 if score.p1_points > score.p2_points else 2


def match_winner(score: Score, best_of: int = cfg.BEST_OF) -> Optional[int]:
    n = sets_to_win(best_of)
    if score.p1_sets >= n:
        return 1
    if score.p2_sets >= n:
        return 2
    return None


def alternate_server(server: int) -> int:
    return 2 if server == 1 else 1


def record_point(
    score: Score,
    player: int,
    target: int = cfg.TARGET,
    best_of: int = cfg.BEST_OF,
) -> Score:
    """Award a point to ``player`` and settle any game or match it decides.

    Returns a new Score. ``game_winner`` is set only when this point closed a
    game; ``winner`` is set once the match is decided. Serve is left alone
    unless a game ends, in which case the game's loser serves next.
    """
    s = score.copy()
    s.game_winner = None

    if s.winner is not None:
        return s  # Match already over

    if player == 1:
        s.p1_points += 1
    else:
        s.p2_points += 1

    s.history.append({
        "p1": s.p1_points,
        "p2": s.p2_points,
        "server": s.server,
        "player": player,
    })

    gw = game_winner(s, target)
    if gw is None:
        return s

    if gw == 1:
        s.p1_sets += 1
    else:
        s.p2_sets += 1
    s.p1_points = s.p2_points = 0
    s.game_winner = gw
    s.server = alternate_server(gw)
    s.winner = match_winner(s, best_of)
    return s


def create_score(server: int = 1) -> Score:
    """Create a fresh match score."""
    return Score(server=server)
