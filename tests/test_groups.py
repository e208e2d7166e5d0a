"""
Tests for group creation, round-robin generation and group scores.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from arena.errors import InvalidInputError, NotFoundError, ReferentialConflictError
from arena.groups import (
    add_group, delete_group, generate_group_matches, generate_round_robin, record_group_score,
)
from arena.models import Stage
from arena.stages import generate_bracket
from conftest import make_finished_stage, make_pair


@pytest.fixture
def stage_with_pairs():
    stage = Stage(name="Stage 1")
    stage.pairs = [make_pair(f"P{i}a", f"P{i}b") for i in range(7)]
    return stage


class TestRoundRobin:
    """Tests for generate_round_robin."""

    def test_three_games_cover_every_pairing_once(self, pair_a, pair_b, pair_c):
        matches = generate_round_robin([pair_a, pair_b, pair_c])
        assert len(matches) == 3
        pairings = [frozenset((m.pair1.id, m.pair2.id)) for m in matches]
        assert set(pairings) == {
            frozenset((pair_a.id, pair_b.id)),
            frozenset((pair_b.id, pair_c.id)),
            frozenset((pair_a.id, pair_c.id)),
        }

    def test_game_order_and_labels(self, pair_a, pair_b, pair_c):
        matches = generate_round_robin([pair_a, pair_b, pair_c])
        assert [(m.pair1.id, m.pair2.id) for m in matches] == [
            (pair_a.id, pair_b.id), (pair_b.id, pair_c.id), (pair_a.id, pair_c.id)
        ]
        assert [m.label for m in matches] == ["Game 1", "Game 2", "Game 3"]

    def test_games_start_unfinished(self, pair_a, pair_b, pair_c):
        matches = generate_round_robin([pair_a, pair_b, pair_c])
        assert not any(m.is_finished for m in matches)
        assert all(m.score1 is None and m.score2 is None for m in matches)

    def test_wrong_group_size(self, pair_a, pair_b):
        with pytest.raises(InvalidInputError):
            generate_round_robin([pair_a, pair_b])


class TestAddGroup:
    """Tests for add_group."""

    def test_creates_numbered_group(self, stage_with_pairs):
        ids = [p.id for p in stage_with_pairs.pairs[:3]]
        new_stage, group = add_group(stage_with_pairs, ids)
        assert group.name == "Group 1"
        assert [p.id for p in group.pairs] == ids
        assert group.matches is None
        assert stage_with_pairs.groups == []
        assert new_stage.groups[0].id == group.id

        newer_stage, second = add_group(new_stage, [p.id for p in stage_with_pairs.pairs[3:6]])
        assert second.name == "Group 2"
        assert [g.id for g in newer_stage.groups] == [second.id, group.id]

    def test_newest_group_seeds_first(self, stage_with_pairs, seeded_rng):
        pairs = stage_with_pairs.pairs
        stage, older = add_group(stage_with_pairs, [p.id for p in pairs[:3]])
        stage, newer = add_group(stage, [p.id for p in pairs[3:6]])
        for group in (older, newer):
            stage = generate_group_matches(stage, group.id)
            for match in stage.find_group(group.id).matches:
                stage = record_group_score(stage, group.id, match.id, 6, 1)

        stage = generate_bracket(stage, seeded_rng)

        first = list(stage.tournament_matches.values())[0]
        # pair1 wins every game, so each group is topped by its first pair
        assert first.label == "Semifinal"
        assert first.pair1.id == newer.pairs[0].id

    def test_requires_three_distinct_pairs(self, stage_with_pairs):
        pairs = stage_with_pairs.pairs
        with pytest.raises(InvalidInputError):
            add_group(stage_with_pairs, [pairs[0].id, pairs[1].id])
        with pytest.raises(InvalidInputError):
            add_group(stage_with_pairs, [pairs[0].id, pairs[0].id, pairs[1].id])

    def test_unknown_pair(self, stage_with_pairs):
        pairs = stage_with_pairs.pairs
        with pytest.raises(NotFoundError):
            add_group(stage_with_pairs, [pairs[0].id, pairs[1].id, "missing"])

    def test_pair_already_grouped(self, stage_with_pairs):
        pairs = stage_with_pairs.pairs
        stage, _ = add_group(stage_with_pairs, [p.id for p in pairs[:3]])
        with pytest.raises(ReferentialConflictError):
            add_group(stage, [pairs[2].id, pairs[3].id, pairs[4].id])


class TestGroupMatches:
    """Tests for generating and scoring group games."""

    def test_generate_matches(self, stage_with_pairs):
        stage, group = add_group(stage_with_pairs, [p.id for p in stage_with_pairs.pairs[:3]])
        updated = generate_group_matches(stage, group.id)
        assert len(updated.find_group(group.id).matches) == 3
        assert stage.find_group(group.id).matches is None

    def test_regenerate_discards_results(self):
        stage = make_finished_stage(1)
        group = stage.groups[0]
        updated = generate_group_matches(stage, group.id)
        assert updated.find_group(group.id).finished_matches == []

    def test_generate_unknown_group(self, stage_with_pairs):
        with pytest.raises(NotFoundError):
            generate_group_matches(stage_with_pairs, "missing")

    def test_record_score(self):
        stage = make_finished_stage(1)
        group = stage.groups[0]
        match = group.matches[0]
        updated = record_group_score(stage, group.id, match.id, "3", 6)
        new_match = updated.find_group(group.id).find_match(match.id)
        assert (new_match.score1, new_match.score2) == (3, 6)
        assert new_match.is_finished
        assert (match.score1, match.score2) == (6, 2)

    def test_record_score_on_unplayed_game(self, stage_with_pairs):
        stage, group = add_group(stage_with_pairs, [p.id for p in stage_with_pairs.pairs[:3]])
        stage = generate_group_matches(stage, group.id)
        match_id = stage.find_group(group.id).matches[1].id
        updated = record_group_score(stage, group.id, match_id, 0, 0)
        match = updated.find_group(group.id).find_match(match_id)
        assert match.is_finished
        assert match.has_result

    @pytest.mark.parametrize("score1,score2", [("abc", 1), (None, 2), (-1, 3), ("", "")])
    def test_invalid_score_is_rejected(self, score1, score2):
        stage = make_finished_stage(1)
        group = stage.groups[0]
        before = stage.to_dict()
        with pytest.raises(InvalidInputError):
            record_group_score(stage, group.id, group.matches[0].id, score1, score2)
        assert stage.to_dict() == before

    def test_unknown_ids(self):
        stage = make_finished_stage(1)
        group = stage.groups[0]
        with pytest.raises(NotFoundError):
            record_group_score(stage, "missing", group.matches[0].id, 1, 2)
        with pytest.raises(NotFoundError):
            record_group_score(stage, group.id, "missing", 1, 2)


class TestDeleteGroup:
    """Tests for delete_group."""

    def test_delete_group_clears_bracket(self, seeded_rng):
        stage = generate_bracket(make_finished_stage(2), seeded_rng)
        assert stage.tournament_matches
        group_id = stage.groups[0].id

        updated = delete_group(stage, group_id)

        assert [g.id for g in updated.groups] == [stage.groups[1].id]
        assert updated.tournament_matches == {}
        assert len(updated.pairs) == len(stage.pairs)
        assert stage.tournament_matches

    def test_delete_unknown_group(self):
        with pytest.raises(NotFoundError):
            delete_group(make_finished_stage(1), "missing")
