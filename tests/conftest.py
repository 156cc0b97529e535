import sys
from pathlib import Path

import pytest

# Ensure the project root is available on the Python path when running the tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.dex import DexCollection  # noqa: E402
from rules.engine import RuleTableResolver  # noqa: E402
from rules.loader import FormatRegistry, load_default_formats  # noqa: E402
from validator.sets import SetValidator  # noqa: E402
from validator.teams import TeamValidator  # noqa: E402

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(scope="session")
def dexes() -> DexCollection:
    return DexCollection.load_from_json(DATA_DIR / "pokedex.json")


@pytest.fixture
def registry(dexes: DexCollection) -> FormatRegistry:
    return load_default_formats(dexes)


@pytest.fixture
def resolver(registry: FormatRegistry) -> RuleTableResolver:
    return RuleTableResolver(registry)


@pytest.fixture
def set_validator(resolver: RuleTableResolver) -> SetValidator:
    return SetValidator(resolver)


@pytest.fixture
def team_validator(set_validator: SetValidator) -> TeamValidator:
    return TeamValidator(set_validator)
