import io
import logging
from pathlib import Path

import pytest

from tests.fixtures import GradleHomeBuilder


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("cachecleaner")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture
def gradle_home(tmp_path) -> Path:
    return tmp_path / "HOME"


@pytest.fixture
def staging_dir(tmp_path) -> Path:
    return tmp_path / "staging"


@pytest.fixture
def home_builder(gradle_home) -> GradleHomeBuilder:
    return GradleHomeBuilder(gradle_home)
