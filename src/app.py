"""
Flask web application for BT Arena.

JSON API used by the UI: athlete roster, stages, pairs, groups, standings and
the elimination bracket. Every write loads the current data, applies one
engine command and saves the result under the data directory lock.
"""
import os
import random

from flask import Flask, jsonify, request

from arena.elimination import get_bracket_display
from arena.errors import ArenaError, InvalidInputError, NotFoundError
from arena.groups import add_group, delete_group, generate_group_matches, record_group_score
from arena.roster import (
    add_pair, available_athletes, create_athlete, delete_athlete, delete_pair, edit_athlete,
    find_athlete, sort_athletes, ungrouped_pairs,
)
from arena.settings import SETTINGS_FILENAME, load_settings
from arena.stages import (
    clear_all_stages, create_stage, delete_stage, find_stage, generate_bracket, rename_stage,
    replace_stage, tournament_phase, update_bracket_score,
)
from arena.standings import calculate_group_standings
from arena.storage import YamlStore, load_athletes, load_stages, save_athletes, save_stages

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('ARENA_DATA_DIR', os.path.join(BASE_DIR, 'data'))


def get_store() -> YamlStore:
    return YamlStore(DATA_DIR)


def load_app_settings() -> dict:
    return load_settings(os.path.join(DATA_DIR, SETTINGS_FILENAME))


def _make_rng(settings: dict) -> random.Random:
    """Random source for the bracket draw, seeded when settings ask for it."""
    seed = settings.get('shuffle_seed')
    return random.Random(seed) if seed is not None else random.Random()


def _request_data() -> dict:
    return request.get_json(silent=True) or {}


def _required(data: dict, key: str) -> str:
    value = data.get(key)
    if isinstance(value, str):
        value = value.strip()
    if not value:
        raise InvalidInputError(f'{key} is required.')
    return value


def _stage_payload(stage) -> dict:
    payload = stage.to_dict()
    payload['phase'] = tournament_phase(stage)
    return payload


def _mutate_stage(stage_id, command):
    """
    Apply ``command(stage) -> (new_stage, extra)`` to one stored stage and save it.

    Returns (new_stage, extra).
    """
    store = get_store()
    with store.lock:
        stages = load_stages(store)
        stage, extra = command(find_stage(stages, stage_id))
        save_stages(store, replace_stage(stages, stage))
    return stage, extra


@app.errorhandler(ArenaError)
def handle_arena_error(error):
    status = 404 if isinstance(error, NotFoundError) else 400
    app.logger.warning(f'{request.method} {request.path} rejected: {error}')
    return jsonify({'success': False, 'error': error.message}), status


# --- Athletes ---

@app.route('/api/athletes', methods=['GET'])
def api_list_athletes():
    """List the roster by category and name, optionally filtered by ?search=."""
    athletes = sort_athletes(load_athletes(get_store()), request.args.get('search', ''))
    return jsonify({'success': True, 'athletes': [a.to_dict() for a in athletes]})


@app.route('/api/athletes/add', methods=['POST'])
def api_add_athlete():
    data = _request_data()
    store = get_store()
    with store.lock:
        athletes, athlete = create_athlete(
            load_athletes(store), data.get('name'), data.get('category'), data.get('tier')
        )
        save_athletes(store, athletes)
    return jsonify({'success': True, 'athlete': athlete.to_dict()})


@app.route('/api/athletes/edit', methods=['POST'])
def api_edit_athlete():
    data = _request_data()
    athlete_id = _required(data, 'athlete_id')
    store = get_store()
    with store.lock:
        athletes = edit_athlete(
            load_athletes(store), athlete_id,
            name=data.get('name'), category=data.get('category'), tier=data.get('tier')
        )
        save_athletes(store, athletes)
    return jsonify({'success': True, 'athlete': find_athlete(athletes, athlete_id).to_dict()})


@app.route('/api/athletes/delete', methods=['POST'])
def api_delete_athlete():
    data = _request_data()
    athlete_id = _required(data, 'athlete_id')
    store = get_store()
    with store.lock:
        athletes = delete_athlete(load_athletes(store), athlete_id, load_stages(store))
        save_athletes(store, athletes)
    return jsonify({'success': True})


# --- Stages ---

@app.route('/api/stages', methods=['GET'])
def api_list_stages():
    stages = load_stages(get_store())
    return jsonify({'success': True, 'stages': [_stage_payload(s) for s in stages]})


@app.route('/api/stages/add', methods=['POST'])
def api_add_stage():
    data = _request_data()
    store = get_store()
    with store.lock:
        stages, stage = create_stage(load_stages(store), data.get('name'))
        save_stages(store, stages)
    return jsonify({'success': True, 'stage': _stage_payload(stage)})


@app.route('/api/stages/edit', methods=['POST'])
def api_edit_stage():
    data = _request_data()
    stage_id = _required(data, 'stage_id')
    store = get_store()
    with store.lock:
        stages = rename_stage(load_stages(store), stage_id, data.get('name'))
        save_stages(store, stages)
    return jsonify({'success': True, 'stage': _stage_payload(find_stage(stages, stage_id))})


@app.route('/api/stages/delete', methods=['POST'])
def api_delete_stage():
    data = _request_data()
    stage_id = _required(data, 'stage_id')
    store = get_store()
    with store.lock:
        stages = delete_stage(load_stages(store), stage_id, confirmed=data.get('confirm') is True)
        save_stages(store, stages)
    return jsonify({'success': True})


@app.route('/api/reset', methods=['POST'])
def api_reset_all():
    """Delete every stage. The athlete roster is kept."""
    data = _request_data()
    store = get_store()
    with store.lock:
        stages = clear_all_stages(load_stages(store), confirmed=data.get('confirm') is True)
        save_stages(store, stages)
    return jsonify({'success': True})


@app.route('/api/stages/<stage_id>', methods=['GET'])
def api_get_stage(stage_id):
    stage = find_stage(load_stages(get_store()), stage_id)
    payload = _stage_payload(stage)
    payload['ungroupedPairs'] = [p.to_dict() for p in ungrouped_pairs(stage)]
    return jsonify({'success': True, 'stage': payload})


@app.route('/api/stages/<stage_id>/available-athletes', methods=['GET'])
def api_available_athletes(stage_id):
    """Athletes not yet paired in the stage; ?category= and ?search= filter."""
    store = get_store()
    stage = find_stage(load_stages(store), stage_id)
    athletes = available_athletes(
        load_athletes(store), stage,
        category=request.args.get('category') or None,
        search=request.args.get('search', '')
    )
    return jsonify({'success': True, 'athletes': [a.to_dict() for a in athletes]})


# --- Pairs ---

@app.route('/api/stages/<stage_id>/pairs/add', methods=['POST'])
def api_add_pair(stage_id):
    data = _request_data()
    athletes = load_athletes(get_store())
    player1 = find_athlete(athletes, _required(data, 'athlete1_id'))
    player2 = find_athlete(athletes, _required(data, 'athlete2_id'))
    _, pair = _mutate_stage(stage_id, lambda stage: add_pair(stage, player1, player2))
    return jsonify({'success': True, 'pair': pair.to_dict()})


@app.route('/api/stages/<stage_id>/pairs/delete', methods=['POST'])
def api_delete_pair(stage_id):
    pair_id = _required(_request_data(), 'pair_id')
    _mutate_stage(stage_id, lambda stage: (delete_pair(stage, pair_id), None))
    return jsonify({'success': True})


# --- Groups ---

@app.route('/api/stages/<stage_id>/groups/add', methods=['POST'])
def api_add_group(stage_id):
    pair_ids = _request_data().get('pair_ids') or []
    if not isinstance(pair_ids, list):
        raise InvalidInputError('pair_ids must be a list.')
    _, group = _mutate_stage(stage_id, lambda stage: add_group(stage, pair_ids))
    return jsonify({'success': True, 'group': group.to_dict()})


@app.route('/api/stages/<stage_id>/groups/delete', methods=['POST'])
def api_delete_group(stage_id):
    group_id = _required(_request_data(), 'group_id')
    stage, _ = _mutate_stage(stage_id, lambda stage: (delete_group(stage, group_id), None))
    return jsonify({'success': True, 'stage': _stage_payload(stage)})


@app.route('/api/stages/<stage_id>/groups/generate-matches', methods=['POST'])
def api_generate_group_matches(stage_id):
    group_id = _required(_request_data(), 'group_id')
    stage, _ = _mutate_stage(stage_id, lambda stage: (generate_group_matches(stage, group_id), None))
    return jsonify({'success': True, 'group': stage.find_group(group_id).to_dict()})


@app.route('/api/stages/<stage_id>/groups/score', methods=['POST'])
def api_group_score(stage_id):
    data = _request_data()
    group_id = _required(data, 'group_id')
    match_id = _required(data, 'match_id')
    stage, _ = _mutate_stage(stage_id, lambda stage: (
        record_group_score(stage, group_id, match_id, data.get('score1'), data.get('score2')), None
    ))
    return jsonify({'success': True, 'group': stage.find_group(group_id).to_dict()})


@app.route('/api/stages/<stage_id>/standings', methods=['GET'])
def api_standings(stage_id):
    stage = find_stage(load_stages(get_store()), stage_id)
    groups = []
    for group in stage.groups:
        rows = []
        for row in calculate_group_standings(group):
            rows.append({**row, 'pair': row['pair'].to_dict()})
        groups.append({'id': group.id, 'name': group.name, 'standings': rows})
    return jsonify({'success': True, 'groups': groups})


# --- Bracket ---

@app.route('/api/stages/<stage_id>/bracket', methods=['GET'])
def api_bracket(stage_id):
    stage = find_stage(load_stages(get_store()), stage_id)
    return jsonify({'success': True, 'bracket': get_bracket_display(stage.tournament_matches)})


@app.route('/api/stages/<stage_id>/bracket/generate', methods=['POST'])
def api_generate_bracket(stage_id):
    """Build a fresh bracket from the group standings, replacing the current one."""
    rng = _make_rng(load_app_settings())
    stage, _ = _mutate_stage(stage_id, lambda stage: (generate_bracket(stage, rng), None))
    app.logger.info(f'Generated bracket for stage {stage.name}')
    return jsonify({'success': True, 'bracket': get_bracket_display(stage.tournament_matches)})


@app.route('/api/stages/<stage_id>/bracket/score', methods=['POST'])
def api_bracket_score(stage_id):
    data = _request_data()
    match_id = _required(data, 'match_id')
    settings = load_app_settings()
    stage, _ = _mutate_stage(stage_id, lambda stage: (
        update_bracket_score(stage, match_id, data.get('score1'), data.get('score2'),
                             court=data.get('court'), settings=settings), None
    ))
    return jsonify({
        'success': True,
        'match': stage.tournament_matches[match_id].to_dict(),
        'bracket': get_bracket_display(stage.tournament_matches)
    })


if __name__ == '__main__':
    app.run(debug=True)
