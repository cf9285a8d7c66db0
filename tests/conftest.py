from __future__ import annotations

import pytest

from src.print_today_epos.print_today_epos.container import build_container


@pytest.fixture
def container():
    """Fully wired services over a fresh in-memory store."""
    return build_container(backend="memory")
