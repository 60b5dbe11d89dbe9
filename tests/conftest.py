"""
Shared test fixtures for SC2 Analytics tests.
"""

import pytest
import sys
from pathlib import Path

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from sc2_analytics.config import AnalysisConfig, get_config


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up a clean development environment"""
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    for key in ("DEBUG", "ANALYSIS_PARALLEL", "ANALYSIS_MAX_WORKERS", "ANALYSIS_HUMANS_ONLY", "LOG_FILE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def clear_config_cache():
    """Never leak a cached config between tests"""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def sequential_config():
    return AnalysisConfig(parallel=False, max_workers=1, humans_only=True)


@pytest.fixture
def parallel_config():
    return AnalysisConfig(parallel=True, max_workers=4, humans_only=True)


@pytest.fixture
def sample_game():
    """Complete five minute ZvT timeline"""
    from tests.fixtures.sample_timelines import build_sample_game
    return build_sample_game()


@pytest.fixture
def sample_document():
    """Decoder document in the raw dict format"""
    from tests.fixtures.sample_timelines import SAMPLE_REPLAY_DOCUMENT
    return SAMPLE_REPLAY_DOCUMENT


@pytest.fixture
def supply_scenario():
    """
    One player capped at 200/200 from t=0 through t=10, then 180/400 at t=11.
    """
    from tests.fixtures.sample_timelines import make_timeline, stats_event

    events = [stats_event(t, 1, used=200, made=200) for t in range(0, 11)]
    events.append(stats_event(11, 1, used=180, made=400))
    return make_timeline(events, duration=60.0)
