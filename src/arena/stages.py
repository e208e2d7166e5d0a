"""
Stage-level commands: the stage list, bracket generation and scoring.

Each command returns new data; persisting it is up to the caller.
"""
import copy
import logging
import random
from typing import Dict, List, Optional, Tuple

from arena.elimination import build_bracket, get_champion, record_bracket_score, seed_pairs_from_groups
from arena.errors import InvalidInputError, NotFoundError, PreconditionError
from arena.models import Pair, Stage

logger = logging.getLogger(__name__)


def find_stage(stages: List[Stage], stage_id) -> Stage:
    for stage in stages:
        if stage.id == stage_id:
            return stage
    raise NotFoundError('Stage', stage_id)


def replace_stage(stages: List[Stage], stage: Stage) -> List[Stage]:
    """Swap in a new version of a stage, keeping list order."""
    find_stage(stages, stage.id)
    return [stage if s.id == stage.id else s for s in stages]


def _parse_name(value) -> str:
    if value is not None and not isinstance(value, str):
        raise InvalidInputError(f"Invalid stage name: {value!r}")
    name = (value or '').strip()
    if not name:
        raise InvalidInputError("Stage name is required.")
    return name


def create_stage(stages: List[Stage], name) -> Tuple[List[Stage], Stage]:
    name = _parse_name(name)
    stage = Stage(name=name)
    return [stage] + list(stages), stage


def rename_stage(stages: List[Stage], stage_id, name) -> List[Stage]:
    name = _parse_name(name)
    stage = copy.deepcopy(find_stage(stages, stage_id))
    stage.name = name
    return replace_stage(stages, stage)


def delete_stage(stages: List[Stage], stage_id, confirmed: bool = False) -> List[Stage]:
    """Remove a stage with all its data. Needs explicit confirmation."""
    stage = find_stage(stages, stage_id)
    if not confirmed:
        raise PreconditionError(f'Deleting stage "{stage.name}" must be confirmed.')
    logger.info("Deleting stage %s", stage.name)
    return [s for s in stages if s.id != stage_id]


def clear_all_stages(stages: List[Stage], confirmed: bool = False) -> List[Stage]:
    """Drop every stage (pairs, groups, brackets). The athlete roster is kept."""
    if not confirmed:
        raise PreconditionError("Clearing all stages must be confirmed.")
    logger.info("Clearing %d stage(s)", len(stages))
    return []


def generate_bracket(stage: Stage, rng: Optional[random.Random] = None) -> Stage:
    """
    Seed the group qualifiers and build a fresh bracket, replacing any
    previous one and its results.
    """
    first_place, second_place = seed_pairs_from_groups(stage.groups, rng)
    stage = copy.deepcopy(stage)
    stage.tournament_matches = build_bracket(first_place, second_place)
    return stage


def update_bracket_score(stage: Stage, match_id, score1, score2, court=None,
                         settings: Optional[Dict] = None) -> Stage:
    """Record a bracket score and advance the winner according to settings."""
    settings = settings or {}
    stage = copy.deepcopy(stage)
    stage.tournament_matches = record_bracket_score(
        stage.tournament_matches, match_id, score1, score2, court=court,
        cascade_invalidation=settings.get('cascade_invalidation', False),
        auto_advance_byes=settings.get('auto_advance_byes', False),
    )
    return stage


def champion(stage: Stage) -> Optional[Pair]:
    return get_champion(stage.tournament_matches)


def tournament_phase(stage: Stage) -> str:
    """
    Determine the current phase of a stage.

    Returns:
        One of: 'setup', 'groups', 'bracket', 'complete'.
    """
    if champion(stage) is not None:
        return 'complete'
    if stage.tournament_matches:
        return 'bracket'
    if any(group.matches for group in stage.groups):
        return 'groups'
    return 'setup'
