from pathlib import Path
from typing import Iterable

import pytest

TEST_DIR = Path(__file__).parent
MARKERS = {
    TEST_DIR / "unit": pytest.mark.unit,
    TEST_DIR / "integration": pytest.mark.integration,
}


def pytest_collection_modifyitems(config, items: Iterable[pytest.Item]):
    for item in items:
        path = Path(item.fspath)
        for directory, marker in MARKERS.items():
            if path.is_relative_to(directory):
                item.add_marker(marker)
