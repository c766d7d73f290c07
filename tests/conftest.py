import sys
from pathlib import Path

import pytest

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from patchvision.core.grammars import GoGrammar, PythonGrammar


@pytest.fixture
def go():
    return GoGrammar()


@pytest.fixture
def python():
    return PythonGrammar()
