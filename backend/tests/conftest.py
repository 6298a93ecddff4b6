"""Pytest fixtures for pipeforge tests."""

import logging

import pytest

from pipeforge.pipeline import PipelineGraph
from tests.conftest_pipeline import make_graph


# Configure the asyncio marker for pytest-asyncio strict mode
def pytest_configure(config):
    """Register the asyncio marker."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def linear_graph() -> PipelineGraph:
    """checkout -> setup -> install -> test -> build -> deploy."""
    specs = [
        ("checkout", "checkout"),
        ("setup", "setup"),
        ("install", "install"),
        ("test", "test"),
        ("build", "build"),
        ("deploy", "deploy"),
    ]
    ids = [node_id for node_id, _ in specs]
    return make_graph(specs, list(zip(ids, ids[1:])))


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
