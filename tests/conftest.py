import pytest

from homeshelf.config import HomeSettings


@pytest.fixture
def settings():
    return HomeSettings()
