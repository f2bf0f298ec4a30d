"""Pytest configuration for tiletrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized
    from tiletrace.core.integrator import setup_background
    from tiletrace.scene.intersection import clear_scene
    from tiletrace.scene.manager import clear_materials

    def _clear_all():
        clear_scene()
        clear_materials()
        setup_background()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def cli_no_init(monkeypatch):
    """Keep the CLI from re-initializing the session's Taichi runtime."""
    import tiletrace.cli

    monkeypatch.setattr(tiletrace.cli, "init_taichi", lambda arch: None)
