"""
Shared pytest fixtures for BT Arena tests.

Running tests:
    pytest tests/
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from arena.models import Athlete, Group, Pair, Stage
from arena.groups import generate_round_robin


def make_pair(name1, name2, category='A'):
    """Create a pair of two fresh athletes."""
    return Pair(
        player1=Athlete(name=name1, category=category, tier='Gold'),
        player2=Athlete(name=name2, category=category, tier='Silver'),
    )


def make_group(name, pairs, scores=None):
    """
    Create a group with its round-robin generated.

    scores: list of (score1, score2) or None per game, in game order.
    """
    group = Group(name=name, pairs=pairs)
    group.matches = generate_round_robin(pairs)
    for match, score in zip(group.matches, scores or []):
        if score is not None:
            match.score1, match.score2 = score
            match.is_finished = True
    return group


def make_finished_stage(num_groups, name='Stage 1'):
    """
    Stage with fully played groups where the first pair of each group wins
    both its games and the second pair beats the third.
    """
    stage = Stage(name=name)
    for g in range(num_groups):
        pairs = [make_pair(f"G{g + 1}P{i + 1}a", f"G{g + 1}P{i + 1}b") for i in range(3)]
        stage.pairs.extend(pairs)
        # Game 1: p1-p2, Game 2: p2-p3, Game 3: p1-p3
        stage.groups.append(make_group(f"Group {g + 1}", pairs, [(6, 2), (6, 3), (6, 1)]))
    return stage


@pytest.fixture
def pair_a():
    return make_pair("Ana", "Bia")


@pytest.fixture
def pair_b():
    return make_pair("Caio", "Duda")


@pytest.fixture
def pair_c():
    return make_pair("Edu", "Fabi")


@pytest.fixture
def abc_group(pair_a, pair_b, pair_c):
    """A beats B 6-2, B beats C 6-4, A beats C 6-1."""
    return make_group("Group 1", [pair_a, pair_b, pair_c], [(6, 2), (6, 4), (6, 1)])


@pytest.fixture
def seeded_rng():
    return random.Random(42)


@pytest.fixture
def athletes():
    """A small roster across categories."""
    return [
        Athlete(name="Marina", category="B", tier="Gold"),
        Athlete(name="Lucas", category="A", tier="Silver"),
        Athlete(name="Bruno", category="A", tier="Gold"),
        Athlete(name="Clara", category="40+", tier="Gold"),
        Athlete(name="Davi", category="Sub 15", tier="Silver"),
        Athlete(name="Elisa", category="B", tier="Silver"),
    ]


@pytest.fixture
def client():
    """Create a test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the application at an empty temporary data directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return str(data_dir)
