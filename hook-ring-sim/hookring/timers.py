"""One-shot tasks scheduled on the simulated clock.

Timers are plain records kept in the game state, so advancing time in a test
fires them deterministically. Each timer remembers the generation it was
scheduled in; a reset bumps the generation and stale timers are dropped
instead of fired.
"""

from dataclasses import dataclass

# Actions a timer can carry
APPLY_SCORE = "apply_score"
RESET_MATCH = "reset_match"


@dataclass(frozen=True)
class Timer:
    due: float
    action: str
    generation: int


def schedule(timers: list, now: float, delay: float, action: str, generation: int) -> list:
    """Return a new timer list with ``action`` due ``delay`` seconds after ``now``."""
    return sorted(timers + [Timer(now + delay, action, generation)], key=lambda tm: tm.due)


def pop_due(timers: list, now: float, generation: int) -> tuple[list, list]:
    """Split ``timers`` into (due actions for this generation, still pending).

    Timers from an older generation are discarded.
    """
    due = []
    pending = []
    for tm in timers:
        if tm.generation != generation:
            continue
        if tm.due <= now:
            due.append(tm)
        else:
            pending.append(tm)
    return due, pending
