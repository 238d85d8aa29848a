from __future__ import annotations

import pytest

from tilecity.city import CitySettings

from tests.helpers import small_settings


@pytest.fixture
def settings() -> CitySettings:
    """Default world settings on a 32x32 chunk."""
    return small_settings()
