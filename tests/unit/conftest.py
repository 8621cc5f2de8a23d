from pathlib import Path

import pytest


def pytest_collection_modifyitems(items):
    """Automatically mark all tests in this directory as unit tests."""
    current_dir = Path(__file__).parent
    for item in items:
        if current_dir in Path(item.fspath).parents:
            item.add_marker(pytest.mark.unit)


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
