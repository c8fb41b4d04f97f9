"""
Shared pytest fixtures for tournament bracket tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset (for small changes)
"""
import pytest
import sys
import os
import yaml

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.elimination import build_knockout
from bracket.models import Team


@pytest.fixture
def client():
    """Create a test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app's data files at a temporary directory."""
    import app as app_module
    from filelock import FileLock

    data_dir = tmp_path / "data"
    data_dir.mkdir()

    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'SETTINGS_FILE', str(data_dir / "settings.yaml"))
    monkeypatch.setattr(app_module, 'TOURNAMENT_FILE', str(data_dir / "tournament.yaml"))
    monkeypatch.setattr(app_module, '_data_lock', FileLock(str(data_dir / ".lock"), timeout=10))

    return data_dir


@pytest.fixture
def five_teams():
    """Five seeded teams, seeds 1..5."""
    return [Team(id=i, name=f"Team {i}", seed=i) for i in range(1, 6)]


@pytest.fixture
def five_team_bracket(five_teams):
    """
    Knockout for five teams.

    ids 1-4: round 1 as (1 v -), (4 v 5), (2 v -), (3 v -)
    ids 5-6: semifinals, id 7: final
    """
    return build_knockout(five_teams)


@pytest.fixture
def four_team_bracket():
    """Two semifinals (ids 1, 2) feeding a final (id 3)."""
    return build_knockout([{'id': t, 'seed': t} for t in ('a', 'b', 'c', 'd')])


@pytest.fixture
def write_tournament(tmp_path):
    """Write a tournament YAML file and return its path."""
    def _write(data, name='tournament.yaml'):
        path = tmp_path / name
        path.write_text(yaml.dump(data, default_flow_style=False))
        return str(path)
    return _write
