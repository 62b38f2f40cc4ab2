"""
Shared test fixtures and configuration.

Provides reusable fixtures for all test files including repository
instances, the competition service and sample competitions.
"""

import os
import shutil
import tempfile
from typing import Any, Dict

import pytest
from unittest.mock import patch

from competitions.services.competition_service import CompetitionService
from competitions.storage import MemoryRepository, get_repository, reset_repository
from tests.helpers import TEAM_NAMES


# =============================================================================
# STORAGE FIXTURES
# =============================================================================

@pytest.fixture
def test_data_dir():
    """Provide a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp(prefix="competitions_test_")
    yield temp_dir

    if os.path.exists(temp_dir):
        try:
            shutil.rmtree(temp_dir)
        except PermissionError:
            pass  # Windows file locking, ignore


@pytest.fixture
def sqlite_repository(test_data_dir):
    """Provide a clean SQLite repository."""
    with patch.dict(os.environ, {'DB_TYPE': 'sqlite', 'DATA_DIR': test_data_dir}, clear=False):
        reset_repository()
        repo = get_repository()
        yield repo
        reset_repository()  # Close connection before cleanup


@pytest.fixture
def repository():
    """Provide an in-memory repository with the sample teams registered."""
    repo = MemoryRepository()
    for team_id, name in TEAM_NAMES.items():
        repo.save_team(team_id, name)
    return repo


@pytest.fixture
def service(repository):
    """Provide a competition service over the in-memory repository."""
    return CompetitionService(repository)


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def two_pool_data() -> Dict[str, Any]:
    """Pool-to-bracket competition with two pools of four."""
    return {
        "id": "spring-open",
        "name": "Spring Open",
        "format": "pool-to-bracket",
        "pools": [
            {"id": "A", "name": "Pool A", "team_ids": ["t1", "t2", "t3", "t4"]},
            {"id": "B", "name": "Pool B", "team_ids": ["t5", "t6", "t7", "t8"]},
        ],
        "seeds": {f"t{i}": i for i in range(1, 9)},
    }


@pytest.fixture
def pool_play_data() -> Dict[str, Any]:
    """Single-pool round robin of three teams."""
    return {
        "id": "fall-league",
        "name": "Fall League",
        "format": "pool-play",
        "pools": [{"id": "A", "name": "Pool A", "team_ids": ["t1", "t2", "t3"]}],
    }


@pytest.fixture
def bracket_data() -> Dict[str, Any]:
    """Straight single-elimination event of five seeded teams."""
    return {
        "id": "sectionals",
        "name": "Sectionals",
        "format": "bracket",
        "team_ids": ["t5", "t3", "t1", "t4", "t2"],
        "seeds": {"t1": 1, "t2": 2, "t3": 3, "t4": 4, "t5": 5},
    }
