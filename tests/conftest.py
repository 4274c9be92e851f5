from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "lodging"


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture
def load_fixture():
    def _load(name):
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")
    return _load
