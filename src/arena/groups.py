"""
Round-robin groups: creation, match generation and score recording.
"""
import copy
import logging
from typing import List, Tuple

from arena.errors import InvalidInputError, NotFoundError, ReferentialConflictError
from arena.models import Group, Match, Pair, Stage
from arena.roster import grouped_pair_ids
from arena.scores import parse_score_pair

logger = logging.getLogger(__name__)

# (first pair index, second pair index) of each game, in play order
ROUND_ROBIN_ORDER = [(0, 1), (1, 2), (0, 2)]


def generate_round_robin(pairs: List[Pair]) -> List[Match]:
    """The three games of a group: p1-p2, p2-p3, p1-p3."""
    if len(pairs) != Group.SIZE:
        raise InvalidInputError(f"A group needs exactly {Group.SIZE} pairs, got {len(pairs)}.")
    return [
        Match(pair1=pairs[i], pair2=pairs[j], label=f"Game {number}")
        for number, (i, j) in enumerate(ROUND_ROBIN_ORDER, start=1)
    ]


def _get_group(stage: Stage, group_id) -> Group:
    group = stage.find_group(group_id)
    if group is None:
        raise NotFoundError('Group', group_id)
    return group


def add_group(stage: Stage, pair_ids: List[str]) -> Tuple[Stage, Group]:
    """Create a group from 3 distinct, ungrouped pairs. The newest group goes first."""
    if len(pair_ids) != Group.SIZE or len(set(pair_ids)) != Group.SIZE:
        raise InvalidInputError(f"Select exactly {Group.SIZE} different pairs.")

    taken = grouped_pair_ids(stage)
    for pair_id in pair_ids:
        if stage.find_pair(pair_id) is None:
            raise NotFoundError('Pair', pair_id)
        if pair_id in taken:
            raise ReferentialConflictError(
                "Pair is already in a group.", {'pair_id': pair_id}
            )

    stage = copy.deepcopy(stage)
    pairs = [stage.find_pair(pair_id) for pair_id in pair_ids]
    group = Group(name=f"Group {len(stage.groups) + 1}", pairs=pairs)
    stage.groups.insert(0, group)
    logger.info("Stage %s: created %s", stage.name, group.name)
    return stage, group


def delete_group(stage: Stage, group_id) -> Stage:
    """Remove a group with its matches. The bracket is cleared as well."""
    _get_group(stage, group_id)
    stage = copy.deepcopy(stage)
    stage.groups = [g for g in stage.groups if g.id != group_id]
    if stage.tournament_matches:
        logger.info("Stage %s: group deleted, clearing bracket", stage.name)
    stage.tournament_matches = {}
    return stage


def generate_group_matches(stage: Stage, group_id) -> Stage:
    """(Re)generate the round-robin games of a group, discarding old results."""
    _get_group(stage, group_id)
    stage = copy.deepcopy(stage)
    group = stage.find_group(group_id)
    group.matches = generate_round_robin(group.pairs)
    return stage


def record_group_score(stage: Stage, group_id, match_id, score1, score2) -> Stage:
    """Store the final score of a group game and mark it finished."""
    score1, score2 = parse_score_pair(score1, score2)
    group = _get_group(stage, group_id)
    if group.find_match(match_id) is None:
        raise NotFoundError('Match', match_id)

    stage = copy.deepcopy(stage)
    match = stage.find_group(group_id).find_match(match_id)
    match.score1 = score1
    match.score2 = score2
    match.is_finished = True
    return stage
