"""
Athlete roster and pair management.

Commands take the current records and return new ones; inputs are never
modified.
"""
import copy
import logging
from typing import List, Optional, Tuple

from arena.errors import InvalidInputError, NotFoundError, ReferentialConflictError
from arena.models import Athlete, Category, CATEGORY_ORDER, Pair, Stage, Tier

logger = logging.getLogger(__name__)


def _parse_category(value) -> Category:
    try:
        return Category(value)
    except ValueError:
        raise InvalidInputError(f"Unknown category: {value!r}")


def _parse_tier(value) -> Tier:
    try:
        return Tier(value)
    except ValueError:
        raise InvalidInputError(f"Unknown tier: {value!r}")


def _parse_name(value) -> str:
    if value is not None and not isinstance(value, str):
        raise InvalidInputError(f"Invalid athlete name: {value!r}")
    name = (value or '').strip()
    if not name:
        raise InvalidInputError("Athlete name is required.")
    return name


def find_athlete(athletes: List[Athlete], athlete_id) -> Athlete:
    for athlete in athletes:
        if athlete.id == athlete_id:
            return athlete
    raise NotFoundError('Athlete', athlete_id)


def create_athlete(athletes: List[Athlete], name, category, tier) -> Tuple[List[Athlete], Athlete]:
    """Register an athlete. Returns (new roster, new athlete)."""
    name = _parse_name(name)
    athlete = Athlete(name=name, category=_parse_category(category), tier=_parse_tier(tier))
    return copy.deepcopy(athletes) + [athlete], athlete


def edit_athlete(athletes: List[Athlete], athlete_id, name=None, category=None, tier=None) -> List[Athlete]:
    """Change name, category or tier of one athlete. Omitted fields are kept."""
    athletes = copy.deepcopy(athletes)
    athlete = find_athlete(athletes, athlete_id)
    if name is not None:
        athlete.name = _parse_name(name)
    if category is not None:
        athlete.category = _parse_category(category)
    if tier is not None:
        athlete.tier = _parse_tier(tier)
    return athletes


def delete_athlete(athletes: List[Athlete], athlete_id, stages: List[Stage]) -> List[Athlete]:
    """Remove an athlete, refused while any pair of any stage includes them."""
    athlete = find_athlete(athletes, athlete_id)
    for stage in stages:
        if any(athlete.id in pair.athlete_ids for pair in stage.pairs):
            raise ReferentialConflictError(
                f'Athlete "{athlete.name}" is in a pair of stage "{stage.name}". '
                f'Remove the pair before deleting the athlete.',
                {'athlete_id': athlete.id, 'stage_id': stage.id}
            )
    return [copy.deepcopy(a) for a in athletes if a.id != athlete_id]


def sort_athletes(athletes: List[Athlete], search: str = '') -> List[Athlete]:
    """Athletes matching ``search`` ordered by category, then name."""
    term = (search or '').lower()
    matching = [a for a in athletes if term in a.name.lower()]
    return sorted(matching, key=lambda a: (CATEGORY_ORDER.get(a.category, 99), a.name.lower()))


def paired_athlete_ids(stage: Stage) -> set:
    ids = set()
    for pair in stage.pairs:
        ids.update(pair.athlete_ids)
    return ids


def available_athletes(athletes: List[Athlete], stage: Stage, category: Optional[str] = None,
                       search: str = '') -> List[Athlete]:
    """Athletes not yet paired in this stage, optionally filtered."""
    taken = paired_athlete_ids(stage)
    wanted = _parse_category(category) if category else None
    return [
        a for a in sort_athletes(athletes, search)
        if a.id not in taken and (wanted is None or a.category == wanted)
    ]


def add_pair(stage: Stage, player1: Athlete, player2: Athlete) -> Tuple[Stage, Pair]:
    """Pair two distinct athletes who are not paired yet in this stage. The newest pair goes first."""
    if player1.id == player2.id:
        raise InvalidInputError("A pair needs two different athletes.")
    taken = paired_athlete_ids(stage)
    for athlete in (player1, player2):
        if athlete.id in taken:
            raise ReferentialConflictError(
                f'Athlete "{athlete.name}" is already paired in this stage.',
                {'athlete_id': athlete.id}
            )

    stage = copy.deepcopy(stage)
    pair = Pair(player1=copy.deepcopy(player1), player2=copy.deepcopy(player2))
    stage.pairs.insert(0, pair)
    logger.info("Stage %s: added pair %s", stage.name, pair.display_name)
    return stage, pair


def grouped_pair_ids(stage: Stage) -> set:
    return {pair.id for group in stage.groups for pair in group.pairs}


def delete_pair(stage: Stage, pair_id) -> Stage:
    """Remove a pair, refused while a group includes it."""
    pair = stage.find_pair(pair_id)
    if pair is None:
        raise NotFoundError('Pair', pair_id)
    if pair.id in grouped_pair_ids(stage):
        raise ReferentialConflictError(
            f'Pair "{pair.display_name}" is in a group. Delete the group first.',
            {'pair_id': pair.id}
        )
    stage = copy.deepcopy(stage)
    stage.pairs = [p for p in stage.pairs if p.id != pair_id]
    return stage


def ungrouped_pairs(stage: Stage) -> List[Pair]:
    taken = grouped_pair_ids(stage)
    return [p for p in stage.pairs if p.id not in taken]
