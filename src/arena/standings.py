"""
Round-robin standings.
"""
from typing import Dict, List

from arena.models import Group, Stage


def calculate_group_standings(group: Group) -> List[Dict]:
    """
    Calculate the standings of one group from its finished matches.

    Returns a list of rows, best first:
        [{'pair': Pair, 'wins': n, 'losses': n, 'games_won': n, 'games_lost': n,
          'balance': n, 'matches_played': n}, ...]

    Ranking: wins -> balance. Equal rows keep the group's pair order.
    """
    pair_stats = {}

    # Initialize stats for each pair
    for pair in group.pairs:
        pair_stats[pair.id] = {
            'pair': pair,
            'wins': 0,
            'losses': 0,
            'games_won': 0,
            'games_lost': 0,
            'balance': 0,
            'matches_played': 0
        }

    for match in group.finished_matches:
        stats1 = pair_stats.get(match.pair1.id)
        stats2 = pair_stats.get(match.pair2.id)
        if stats1 is None or stats2 is None:
            continue

        stats1['matches_played'] += 1
        stats2['matches_played'] += 1
        stats1['games_won'] += match.score1
        stats1['games_lost'] += match.score2
        stats2['games_won'] += match.score2
        stats2['games_lost'] += match.score1

        if match.score1 > match.score2:
            stats1['wins'] += 1
            stats2['losses'] += 1
        elif match.score2 > match.score1:
            stats2['wins'] += 1
            stats1['losses'] += 1

        # Deltas cancel out: what one pair gains the other concedes
        stats1['balance'] += match.score1 - match.score2
        stats2['balance'] += match.score2 - match.score1

    # sorted() is stable, ties keep initialization order
    return sorted(
        pair_stats.values(),
        key=lambda x: (-x['wins'], -x['balance'])
    )


def calculate_stage_standings(stage: Stage) -> Dict[str, List[Dict]]:
    """Standings for every group of a stage, keyed by group id."""
    return {group.id: calculate_group_standings(group) for group in stage.groups}
