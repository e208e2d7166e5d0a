"""
Single elimination bracket generation and management.

A bracket is a dict of TournamentMatch nodes keyed by id, in build order.
Each node except the final carries a forward link (``next_match_id``,
``next_match_slot``) to the slot of the node its winner advances into.
"""
import copy
import logging
import math
import random
from typing import Dict, List, Optional, Tuple

from arena.errors import NotFoundError, PreconditionError
from arena.models import Group, Pair, TournamentMatch
from arena.scores import parse_score_pair
from arena.standings import calculate_group_standings

logger = logging.getLogger(__name__)

Bracket = Dict[str, TournamentMatch]


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Get the name of a round based on its distance from the final."""
    if round_number == total_rounds:
        return "Final"
    elif round_number == total_rounds - 1:
        return "Semifinal"
    elif round_number == total_rounds - 2:
        return "Quarters"
    else:
        return f"Round {round_number}"


def calculate_round_sizes(first_round_size: int) -> List[int]:
    """
    Node count of every round, first round first.

    Each round halves the previous one, rounding up, until a single node.
    For 5 first-round matches: [5, 3, 2, 1]
    """
    if first_round_size <= 0:
        return []
    sizes = [first_round_size]
    while sizes[-1] > 1:
        sizes.append(math.ceil(sizes[-1] / 2))
    return sizes


def seed_pairs_from_groups(groups: List[Group],
                           rng: Optional[random.Random] = None) -> Tuple[List[Pair], List[Pair]]:
    """
    Collect the qualifiers of every group.

    Returns (first_place, second_place). Only groups with at least one
    finished match take part, in group order. second_place comes back
    shuffled so first and second places are drawn against each other at
    random; pass a seeded ``rng`` for a reproducible draw.

    Raises PreconditionError when no group has a finished match.
    """
    first_place = []
    second_place = []

    for group in groups:
        if not group.finished_matches:
            continue
        standings = calculate_group_standings(group)
        if len(standings) > 0:
            first_place.append(standings[0]['pair'])
        if len(standings) > 1:
            second_place.append(standings[1]['pair'])

    if not first_place:
        raise PreconditionError("Not enough finished matches to generate the bracket.")

    rng = rng or random.Random()
    shuffled = list(second_place)
    rng.shuffle(shuffled)
    return first_place, shuffled


def build_bracket(first_place: List[Pair], second_place: List[Pair]) -> Bracket:
    """
    Build the whole bracket from the seed lists.

    Round 1 pairs first_place[i] against second_place[i]; entries beyond the
    shorter list are left out. Later rounds start empty and are filled by
    score propagation. With an odd node count the last node of a round feeds
    slot 1 of its downstream node and nothing feeds slot 2 there.
    """
    first_round_size = min(len(first_place), len(second_place))
    if first_round_size == 0:
        return {}

    surplus = len(first_place) + len(second_place) - 2 * first_round_size
    if surplus:
        logger.warning("Dropping %d seeded pair(s) without a first round opponent", surplus)

    round_sizes = calculate_round_sizes(first_round_size)
    total_rounds = len(round_sizes)

    rounds = [[
        TournamentMatch(round=1, pair1=first_place[i], pair2=second_place[i])
        for i in range(first_round_size)
    ]]
    for round_number, size in enumerate(round_sizes[1:], start=2):
        next_round = [TournamentMatch(round=round_number) for _ in range(size)]
        for i, node in enumerate(rounds[-1]):
            node.next_match_id = next_round[i // 2].id
            node.next_match_slot = 1 if i % 2 == 0 else 2
        rounds.append(next_round)

    bracket = {}
    for round_nodes in rounds:
        for node in round_nodes:
            node.label = get_round_name(node.round, total_rounds)
            bracket[node.id] = node

    logger.info("Built bracket: %d rounds, %d matches", total_rounds, len(bracket))
    return bracket


def determine_winner(node: TournamentMatch) -> Optional[Pair]:
    """The pair with the strictly higher score, or None on a tie or an empty slot."""
    if node.pair1 is None or node.pair2 is None:
        return None
    if node.score1 is None or node.score2 is None:
        return None
    if node.score1 > node.score2:
        return node.pair1
    elif node.score2 > node.score1:
        return node.pair2
    return None


def has_bye_slot(bracket: Bracket, node: TournamentMatch) -> bool:
    """True when a later-round node has no upstream node feeding its slot 2."""
    if node.round == 1:
        return False
    return not any(
        other.next_match_id == node.id and other.next_match_slot == 2
        for other in bracket.values()
    )


def _same_pair(a: Optional[Pair], b: Optional[Pair]) -> bool:
    if a is None or b is None:
        return a is b
    return a.id == b.id


def _propagate(bracket: Bracket, node: TournamentMatch, auto_advance_byes: bool):
    if node.winner is None or node.next_match_id is None:
        return
    target = bracket.get(node.next_match_id)
    if target is None:
        logger.warning("Bracket match %s links to missing match %s", node.id, node.next_match_id)
        return
    target.set_slot(node.next_match_slot, node.winner)

    if auto_advance_byes and has_bye_slot(bracket, target):
        target.winner = target.pair1
        _propagate(bracket, target, auto_advance_byes)


def _invalidate_downstream(bracket: Bracket, node: TournamentMatch, stale: Pair):
    """Remove a stale winner from every node it reached, clearing their results."""
    target_id = node.next_match_id
    slot = node.next_match_slot
    while target_id:
        target = bracket.get(target_id)
        if target is None or not _same_pair(target.get_slot(slot), stale):
            return
        target.set_slot(slot, None)
        stale = target.winner
        target.score1 = None
        target.score2 = None
        target.winner = None
        logger.info("Cleared stale result of bracket match %s", target.id)
        if stale is None:
            return
        target_id = target.next_match_id
        slot = target.next_match_slot


def record_bracket_score(bracket: Bracket, match_id, score1, score2, court=None,
                         cascade_invalidation: bool = False,
                         auto_advance_byes: bool = False) -> Bracket:
    """
    Record a score on a bracket node and advance its winner.

    Returns a new bracket; the input is not modified.

    Re-recording a score re-propagates into the same downstream slot. Unless
    ``cascade_invalidation`` is set, results further downstream that were
    computed from the old winner are left as they are.
    """
    score1, score2 = parse_score_pair(score1, score2)
    if match_id not in bracket:
        raise NotFoundError('Bracket match', match_id)
    if auto_advance_byes and has_bye_slot(bracket, bracket[match_id]):
        raise PreconditionError("This match is a bye: its pair advances without a score.")

    bracket = copy.deepcopy(bracket)
    node = bracket[match_id]
    previous_winner = node.winner

    node.score1 = score1
    node.score2 = score2
    if court is not None:
        node.court = court
    node.winner = determine_winner(node)

    if cascade_invalidation and previous_winner is not None \
            and not _same_pair(previous_winner, node.winner):
        _invalidate_downstream(bracket, node, previous_winner)

    _propagate(bracket, node, auto_advance_byes)
    return bracket


def get_final(bracket: Bracket) -> Optional[TournamentMatch]:
    finals = [node for node in bracket.values() if node.next_match_id is None]
    if not finals:
        return None
    return max(finals, key=lambda node: node.round)


def get_champion(bracket: Bracket) -> Optional[Pair]:
    final = get_final(bracket)
    return final.winner if final else None


def get_bracket_display(bracket: Bracket) -> Dict:
    """
    Get bracket data grouped by round for UI display.

    Returns dict with:
    - 'rounds': list of {'round': n, 'name': label, 'matches': [node dicts]}
    - 'total_rounds': number of rounds
    - 'matches_per_round': round name -> node count
    - 'champion': pair dict of the final's winner, or None
    """
    by_round = {}
    for node in bracket.values():
        by_round.setdefault(node.round, []).append(node)

    total_rounds = max(by_round) if by_round else 0
    rounds = []
    matches_per_round = {}
    for round_number in sorted(by_round):
        name = get_round_name(round_number, total_rounds)
        nodes = by_round[round_number]
        rounds.append({
            'round': round_number,
            'name': name,
            'matches': [node.to_dict() for node in nodes]
        })
        matches_per_round[name] = len(nodes)

    champion = get_champion(bracket)
    return {
        'rounds': rounds,
        'total_rounds': total_rounds,
        'matches_per_round': matches_per_round,
        'champion': champion.to_dict() if champion else None
    }
