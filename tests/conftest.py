"""Shared fixtures over the bundled seed dataset."""

import pytest

from lore_graph.config import BUNDLED_SEEDS_DIR, Settings
from lore_graph.schema.registry import get_registry
from lore_graph.store.memory import InMemoryRowStore


@pytest.fixture(scope="session")
def registry():
    return get_registry()


@pytest.fixture(scope="session")
def store(registry):
    return InMemoryRowStore(registry, seed_dir=BUNDLED_SEEDS_DIR)


@pytest.fixture
def settings():
    return Settings(_env_file=None)
