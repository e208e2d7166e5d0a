"""
Data model for athletes, pairs, groups and the elimination bracket.

Every record round-trips to a plain JSON-compatible dict with the camelCase
keys of the persisted document. Readers ignore keys they do not know and
default the optional ones, so newer documents load in older code.
"""
import time
import uuid
from enum import Enum
from typing import Dict, List, Optional


class Category(str, Enum):
    A = 'A'
    B = 'B'
    C = 'C'
    D = 'D'
    SUB15 = 'Sub 15'
    PLUS40 = '40+'


# Display order for rosters
CATEGORY_ORDER = {
    Category.A: 1,
    Category.B: 2,
    Category.C: 3,
    Category.D: 4,
    Category.SUB15: 5,
    Category.PLUS40: 6,
}


class Tier(str, Enum):
    GOLD = 'Gold'
    SILVER = 'Silver'


STAGE_STATUS_OPEN = 'OPEN'


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class Athlete:
    def __init__(self, name, category, tier, id=None, created_at=None):
        self.id = id or new_id()
        self.name = name
        self.category = Category(category)
        self.tier = Tier(tier)
        self.created_at = created_at if created_at is not None else now_ms()

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category.value,
            'tier': self.tier.value,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Athlete':
        return cls(
            name=data['name'],
            category=data['category'],
            tier=data.get('tier', Tier.GOLD.value),
            id=data['id'],
            created_at=data.get('createdAt'),
        )

    def __repr__(self):
        return f"Athlete(name={self.name}, category={self.category.value}, tier={self.tier.value})"


class Pair:
    def __init__(self, player1: Athlete, player2: Athlete, id=None, created_at=None):
        self.id = id or new_id()
        self.player1 = player1
        self.player2 = player2
        self.created_at = created_at if created_at is not None else now_ms()

    @property
    def athlete_ids(self):
        return (self.player1.id, self.player2.id)

    @property
    def display_name(self) -> str:
        return f"{self.player1.name} / {self.player2.name}"

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'player1': self.player1.to_dict(),
            'player2': self.player2.to_dict(),
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Pair':
        return cls(
            player1=Athlete.from_dict(data['player1']),
            player2=Athlete.from_dict(data['player2']),
            id=data['id'],
            created_at=data.get('createdAt'),
        )

    def __repr__(self):
        return f"Pair(id={self.id}, players={self.display_name})"


def _pair_or_none(data: Optional[Dict]) -> Optional[Pair]:
    return Pair.from_dict(data) if data else None


def _pair_dict_or_none(pair: Optional[Pair]) -> Optional[Dict]:
    return pair.to_dict() if pair else None


class Match:
    """A round-robin game between two pairs of the same group."""

    def __init__(self, pair1: Pair, pair2: Pair, label, id=None,
                 score1=None, score2=None, is_finished=False):
        self.id = id or new_id()
        self.pair1 = pair1
        self.pair2 = pair2
        self.label = label
        self.score1 = score1
        self.score2 = score2
        self.is_finished = is_finished

    @property
    def has_result(self) -> bool:
        return self.is_finished and self.score1 is not None and self.score2 is not None

    def to_dict(self) -> Dict:
        data = {
            'id': self.id,
            'pair1': self.pair1.to_dict(),
            'pair2': self.pair2.to_dict(),
            'label': self.label,
            'isFinished': self.is_finished,
        }
        if self.score1 is not None:
            data['score1'] = self.score1
        if self.score2 is not None:
            data['score2'] = self.score2
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        return cls(
            pair1=Pair.from_dict(data['pair1']),
            pair2=Pair.from_dict(data['pair2']),
            label=data.get('label', ''),
            id=data['id'],
            score1=data.get('score1'),
            score2=data.get('score2'),
            is_finished=bool(data.get('isFinished', False)),
        )

    def __repr__(self):
        return f"Match(label={self.label}, score={self.score1}-{self.score2}, finished={self.is_finished})"


class Group:
    """Three pairs playing a round-robin."""

    SIZE = 3

    def __init__(self, name, pairs: List[Pair], id=None, matches: Optional[List[Match]] = None,
                 created_at=None):
        self.id = id or new_id()
        self.name = name
        self.pairs = list(pairs)
        self.matches = matches
        self.created_at = created_at if created_at is not None else now_ms()

    @property
    def finished_matches(self) -> List[Match]:
        return [m for m in (self.matches or []) if m.has_result]

    def find_match(self, match_id) -> Optional[Match]:
        for match in self.matches or []:
            if match.id == match_id:
                return match
        return None

    def to_dict(self) -> Dict:
        data = {
            'id': self.id,
            'name': self.name,
            'pairs': [p.to_dict() for p in self.pairs],
            'createdAt': self.created_at,
        }
        if self.matches is not None:
            data['matches'] = [m.to_dict() for m in self.matches]
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'Group':
        matches = data.get('matches')
        return cls(
            name=data['name'],
            pairs=[Pair.from_dict(p) for p in data.get('pairs', [])],
            id=data['id'],
            matches=[Match.from_dict(m) for m in matches] if matches is not None else None,
            created_at=data.get('createdAt'),
        )

    def __repr__(self):
        return f"Group(name={self.name}, pairs={len(self.pairs)}, matches={len(self.matches or [])})"


class TournamentMatch:
    """A node of the elimination bracket.

    ``next_match_id`` and ``next_match_slot`` point at the slot of the
    downstream node that receives this node's winner. The final has neither.
    """

    def __init__(self, round, label='', id=None, pair1: Optional[Pair] = None,
                 pair2: Optional[Pair] = None, score1=None, score2=None,
                 winner: Optional[Pair] = None, next_match_id=None, next_match_slot=None,
                 court=None):
        self.id = id or new_id()
        self.round = round
        self.label = label
        self.pair1 = pair1
        self.pair2 = pair2
        self.score1 = score1
        self.score2 = score2
        self.winner = winner
        self.next_match_id = next_match_id
        self.next_match_slot = next_match_slot
        self.court = court

    def get_slot(self, slot: int) -> Optional[Pair]:
        return self.pair1 if slot == 1 else self.pair2

    def set_slot(self, slot: int, pair: Optional[Pair]):
        if slot == 1:
            self.pair1 = pair
        else:
            self.pair2 = pair

    def to_dict(self) -> Dict:
        data = {
            'id': self.id,
            'round': self.round,
            'label': self.label,
        }
        optional = {
            'pair1': _pair_dict_or_none(self.pair1),
            'pair2': _pair_dict_or_none(self.pair2),
            'score1': self.score1,
            'score2': self.score2,
            'winner': _pair_dict_or_none(self.winner),
            'nextMatchId': self.next_match_id,
            'nextMatchSlot': self.next_match_slot,
            'court': self.court,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'TournamentMatch':
        return cls(
            round=data['round'],
            label=data.get('label', ''),
            id=data['id'],
            pair1=_pair_or_none(data.get('pair1')),
            pair2=_pair_or_none(data.get('pair2')),
            score1=data.get('score1'),
            score2=data.get('score2'),
            winner=_pair_or_none(data.get('winner')),
            next_match_id=data.get('nextMatchId'),
            next_match_slot=data.get('nextMatchSlot'),
            court=data.get('court'),
        )

    def __repr__(self):
        return f"TournamentMatch(round={self.round}, label={self.label}, score={self.score1}-{self.score2})"


class Stage:
    """One tournament edition: its pairs, groups and bracket.

    ``tournament_matches`` maps node id to node and keeps build order
    (round by round, top to bottom).
    """

    def __init__(self, name, id=None, pairs: Optional[List[Pair]] = None,
                 groups: Optional[List[Group]] = None,
                 tournament_matches: Optional[Dict[str, TournamentMatch]] = None,
                 created_at=None, status=STAGE_STATUS_OPEN):
        self.id = id or new_id()
        self.name = name
        self.pairs = pairs if pairs is not None else []
        self.groups = groups if groups is not None else []
        self.tournament_matches = tournament_matches if tournament_matches is not None else {}
        self.created_at = created_at if created_at is not None else now_ms()
        self.status = status

    def find_pair(self, pair_id) -> Optional[Pair]:
        for pair in self.pairs:
            if pair.id == pair_id:
                return pair
        return None

    def find_group(self, group_id) -> Optional[Group]:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'pairs': [p.to_dict() for p in self.pairs],
            'groups': [g.to_dict() for g in self.groups],
            'tournamentMatches': [m.to_dict() for m in self.tournament_matches.values()],
            'createdAt': self.created_at,
            'status': self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Stage':
        nodes = [TournamentMatch.from_dict(m) for m in data.get('tournamentMatches') or []]
        return cls(
            name=data['name'],
            id=data['id'],
            pairs=[Pair.from_dict(p) for p in data.get('pairs') or []],
            groups=[Group.from_dict(g) for g in data.get('groups') or []],
            tournament_matches={node.id: node for node in nodes},
            created_at=data.get('createdAt'),
            status=data.get('status', STAGE_STATUS_OPEN),
        )

    def __repr__(self):
        return f"Stage(name={self.name}, pairs={len(self.pairs)}, groups={len(self.groups)})"
