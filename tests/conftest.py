"""Root conftest for test suite - adds src and the repository root to Python path."""

import sys
from pathlib import Path

# Repository root for ``tests.mocks`` imports, src for the package itself
repo_root = Path(__file__).parent.parent
for path in (repo_root, repo_root / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
