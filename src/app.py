"""
Flask web application for Tournament Bracket.

A thin JSON API over the bracket core: every request carries the match
data it needs, the core computes, and the response is returned as JSON.
Only the layout settings are kept on disk.
"""
import os
import yaml
from filelock import FileLock
from flask import Flask, request, jsonify

from bracket.connectors import connector_paths_for_layout
from bracket.dependencies import DependencyResolver
from bracket.editing import (
    build_intent,
    bulk_assign_first_round,
    first_round_matches,
    first_round_options,
    auto_seed_and_pair,
    slot_locks,
    is_editable_card,
)
from bracket.elimination import build_knockout, get_knockout_summary
from bracket.formats import TournamentFormat
from bracket.labels import get_labels
from bracket.layout import get_default_layout_settings, merge_layout_settings, compute_layout
from bracket.models import Match, Team
from bracket.round_robin import generate_round_robin, idle_matchdays
from bracket.winners import compute_winner, implied_teams, had_bye

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))

SETTINGS_FILE = os.path.join(DATA_DIR, 'settings.yaml')
TOURNAMENT_FILE = os.path.join(DATA_DIR, 'tournament.yaml')
_data_lock = FileLock(os.path.join(DATA_DIR, '.lock'), timeout=10)

# Settings that must stay numeric when posted from a form
NUMERIC_SETTINGS = {'min_card_height', 'min_row_gap', 'col_width', 'gap_x', 'max_auto_fit',
                    'curve_tension', 'stub_height'}


def _bad_request(message):
    return jsonify({'success': False, 'error': message}), 400


def _json_keys(mapping: dict) -> dict:
    """Stringify keys so stub (int) and real ids of any type serialise together."""
    return {str(k): v for k, v in mapping.items()}


def _parse_matches(data) -> list:
    raw = data.get('matches')
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("matches must be a list")
    return [Match.from_dict(m) for m in raw if isinstance(m, dict)]


def _parse_teams_map(data) -> dict:
    """teams may be a list of team dicts or a {id: team} mapping."""
    raw = data.get('teams') or []
    if isinstance(raw, dict):
        raw = [dict(team, id=team.get('id', key)) for key, team in raw.items()]
    teams = [Team.from_dict(t) for t in raw if isinstance(t, dict)]
    return {t.id: t for t in teams}


def _coerce_setting(key, value):
    """Numeric settings arrive as strings from forms; raises ValueError when they are not numbers."""
    if key in NUMERIC_SETTINGS and value is not None:
        try:
            return float(value) if key == 'curve_tension' else int(value)
        except (TypeError, ValueError):
            raise ValueError(f'{key} must be a number')
    return value


def _mapping_field(data, key) -> dict:
    raw = data.get(key)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{key} must be an object")
    return raw


def _settings_labels():
    return get_labels(load_settings().get('lang', 'en'))


def _lookup_key(mapping: dict, key):
    """Match ids arrive from JSON as strings in object keys."""
    if key in mapping:
        return mapping[key]
    return mapping.get(str(key))


def load_settings():
    """Load layout settings from YAML file, merging with defaults."""
    defaults = get_default_layout_settings()
    if not os.path.exists(SETTINGS_FILE):
        return defaults
    try:
        with open(SETTINGS_FILE, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        app.logger.warning(f'Failed to parse {SETTINGS_FILE}: {e}')
        return defaults
    if not isinstance(data, dict):
        return defaults
    # Merge with defaults to ensure all keys exist
    for key, value in defaults.items():
        if key not in data:
            data[key] = value
    return data


def save_settings(settings):
    """Save layout settings to YAML file."""
    os.makedirs(DATA_DIR, exist_ok=True)
    with _data_lock:
        with open(SETTINGS_FILE, 'w', encoding='utf-8') as f:
            yaml.dump(settings, f, default_flow_style=False, allow_unicode=True)


def load_tournament():
    """Load the stored tournament definition, or None when there is none."""
    if not os.path.exists(TOURNAMENT_FILE):
        return None
    try:
        with open(TOURNAMENT_FILE, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        app.logger.warning(f'Failed to parse {TOURNAMENT_FILE}: {e}')
        return None
    return data if isinstance(data, dict) else None


def serialize_draft(draft: dict, labels=None) -> dict:
    result = {
        'stage_index': draft['stage_index'],
        'name': draft.get('name'),
        'kind': draft['kind'],
    }
    if 'rows' in draft:
        result['rows'] = [row.to_dict() for row in draft['rows']]
    if 'groups' in draft:
        result['groups'] = draft['groups']
    if 'matches' in draft:
        result['matches'] = [m.to_dict() for m in draft['matches']]
        result['summary'] = get_knockout_summary(draft['matches'], labels)
    return result


@app.route('/api/knockout', methods=['POST'])
def api_knockout():
    """Generate a seeded single elimination bracket."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request('JSON body required')
    entrants = data.get('entrants') or []
    if not isinstance(entrants, list):
        return _bad_request('entrants must be a list')
    try:
        stage_index = int(data.get('stage_index', 0))
        start_id = int(data.get('start_id', 1))
    except (TypeError, ValueError):
        return _bad_request('stage_index and start_id must be integers')

    matches = build_knockout(entrants, stage_index=stage_index, start_id=start_id)
    return jsonify({
        'success': True,
        'matches': [m.to_dict() for m in matches],
        'summary': get_knockout_summary(matches, _settings_labels()),
    })


@app.route('/api/round-robin', methods=['POST'])
def api_round_robin():
    """Generate a circle-method round robin."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request('JSON body required')
    team_ids = data.get('team_ids') or []
    if not isinstance(team_ids, list):
        return _bad_request('team_ids must be a list')
    try:
        repeats = int(data.get('repeats', 1))
        stage_index = int(data.get('stage_index', 0))
    except (TypeError, ValueError):
        return _bad_request('repeats and stage_index must be integers')

    rows = generate_round_robin(team_ids, repeats, stage_index, data.get('group_index'))
    return jsonify({
        'success': True,
        'rows': [row.to_dict() for row in rows],
        'idle_matchdays': _json_keys(idle_matchdays(rows, team_ids)),
    })


@app.route('/api/tournament/draft', methods=['POST'])
def api_tournament_draft():
    """Draft every stage of a tournament; falls back to the stored tournament file."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or 'stages' not in data:
        data = load_tournament()
    if not data:
        return _bad_request('No tournament definition provided')

    teams = [Team.from_dict(t) for t in data.get('teams') or [] if isinstance(t, dict)]
    stages = data.get('stages') or []
    if not isinstance(stages, list):
        return _bad_request('stages must be a list')
    try:
        drafts = TournamentFormat(teams, stages).generate()
    except ValueError as e:
        return _bad_request(str(e))

    labels = _settings_labels()
    return jsonify({'success': True, 'stages': [serialize_draft(d, labels) for d in drafts]})


@app.route('/api/bracket/parents', methods=['POST'])
def api_bracket_parents():
    """Resolved feeding matches for one match."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request('JSON body required')
    try:
        matches = _parse_matches(data)
    except ValueError as e:
        return _bad_request(str(e))

    resolver = DependencyResolver(matches)
    match = next((m for m in resolver.matches if m.id == data.get('match_id')), None)
    if match is None:
        return _bad_request('Match not found in bracket')

    links = resolver.resolve(match)
    return jsonify({
        'success': True,
        'match_id': match.id,
        'links': {slot: link.to_dict() if link else None for slot, link in links.items()},
        'locks': slot_locks(match),
    })


@app.route('/api/bracket/layout', methods=['POST'])
def api_bracket_layout():
    """Offsets, stubs and connector paths for one bracket."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request('JSON body required')
    try:
        matches = _parse_matches(data)
        overrides = _mapping_field(data, 'settings')
        given_sizes = _mapping_field(data, 'sizes')
        given_centers = _mapping_field(data, 'base_centers')
        overrides = {k: _coerce_setting(k, v) for k, v in overrides.items() if v is not None}
    except ValueError as e:
        return _bad_request(str(e))

    settings = merge_layout_settings(load_settings())
    settings.update(overrides)

    ids = [m.id for m in matches]
    sizes = {}
    centers = {}
    for match_id in ids:
        size = _lookup_key(given_sizes, match_id)
        if size is not None:
            sizes[match_id] = size
        center = _lookup_key(given_centers, match_id)
        if center is not None:
            centers[match_id] = center

    layout = compute_layout(matches, sizes=sizes, base_centers=centers, settings=settings)
    paths = connector_paths_for_layout(layout, settings.get('curve_tension'))

    result = layout.to_dict()
    for key in ('targets', 'offsets', 'heights'):
        result[key] = _json_keys(result[key])
    editable = bool(data.get('editable', False))
    result.update({
        'success': True,
        'edges': [e.to_dict() for e in layout.edges() if not layout.is_stub(e.from_id)],
        'paths': [p.to_dict() for p in paths],
        'editable': {
            str(m.id): is_editable_card(m, layout.columns[m.id], editable)
            for _, column in layout.rounds for m in column if not m.is_stub
        },
    })
    return jsonify(result)


@app.route('/api/bracket/winners', methods=['POST'])
def api_bracket_winners():
    """Winners of finished matches and the display-only implied-team overlay."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request('JSON body required')
    try:
        matches = _parse_matches(data)
    except ValueError as e:
        return _bad_request(str(e))

    resolver = DependencyResolver(matches)
    overlay = implied_teams(matches, resolver, include_byes=bool(data.get('include_byes', False)))

    rounds = {}
    for m in resolver.matches:
        rounds.setdefault(m.round, []).append(m)
    columns = [(r, rounds[r]) for r in sorted(rounds)]
    byes = {}
    for index, (_, column) in enumerate(columns):
        for m in column:
            flagged = [team_id for team_id in (m.team_a_id, m.team_b_id) if had_bye(columns, index, team_id)]
            if flagged:
                byes[str(m.id)] = flagged

    return jsonify({
        'success': True,
        'winners': {str(m.id): compute_winner(m) for m in matches if compute_winner(m) is not None},
        'overlay': _json_keys(overlay),
        'byes': byes,
    })


@app.route('/api/bracket/first-round/options', methods=['POST'])
def api_first_round_options():
    """Picker options for a first-round slot."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request('JSON body required')
    try:
        matches = _parse_matches(data)
    except ValueError as e:
        return _bad_request(str(e))

    settings = load_settings()
    options = first_round_options(
        first_round_matches(matches),
        _parse_teams_map(data),
        current_team_id=data.get('current_team_id'),
        eligible=data.get('eligible'),
        labels=get_labels(data.get('lang') or settings.get('lang', 'en')),
    )
    return jsonify({'success': True, 'options': options})


@app.route('/api/bracket/auto-seed', methods=['POST'])
def api_auto_seed():
    """Pair the best seeds into the first round and return the bulk intent."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request('JSON body required')
    try:
        matches = _parse_matches(data)
    except ValueError as e:
        return _bad_request(str(e))

    ordered_ids = data.get('ordered_ids')
    reseed = (lambda: ordered_ids) if isinstance(ordered_ids, list) else None
    rows = auto_seed_and_pair(first_round_matches(matches), _parse_teams_map(data),
                              eligible=data.get('eligible'), reseed=reseed)
    return jsonify({'success': True, 'intent': bulk_assign_first_round(rows)})


@app.route('/api/bracket/intent', methods=['POST'])
def api_bracket_intent():
    """Validate an editing intent and echo it back normalised."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request('JSON body required')
    try:
        intent = build_intent(data)
    except ValueError as e:
        return _bad_request(str(e))
    return jsonify({'success': True, 'intent': intent})


@app.route('/api/settings', methods=['GET'])
def api_get_settings():
    return jsonify({'success': True, 'settings': load_settings()})


@app.route('/api/settings/update', methods=['POST'])
def api_update_settings():
    """AJAX endpoint for updating layout settings."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request('JSON body required')
    settings = load_settings()

    # Update all provided fields
    for key, value in data.items():
        try:
            value = _coerce_setting(key, value)
        except ValueError as e:
            return _bad_request(str(e))
        if key == 'lang' and value not in ('en', 'el'):
            return _bad_request('lang must be "en" or "el"')
        settings[key] = value

    save_settings(settings)
    app.logger.info(f'Layout settings updated: {sorted(data.keys())}')
    return jsonify({'success': True, 'settings': settings})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
