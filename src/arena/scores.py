"""
Score input validation shared by group matches and bracket nodes.
"""
import re
from typing import Tuple

from arena.errors import InvalidInputError

SCORE_PATTERN = re.compile(r'-?[0-9]+')


def parse_score(value) -> int:
    """Parse one score from a form/JSON value. Accepts ints and digit strings."""
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid score: {value!r}")
    if isinstance(value, int):
        score = value
    elif isinstance(value, str) and SCORE_PATTERN.fullmatch(value.strip()):
        score = int(value.strip())
    else:
        raise InvalidInputError(f"Invalid score: {value!r}")
    if score < 0:
        raise InvalidInputError(f"Score cannot be negative: {score}")
    return score


def parse_score_pair(score1, score2) -> Tuple[int, int]:
    return parse_score(score1), parse_score(score2)
