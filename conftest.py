import pytest

from config import settings
from library import Library

@pytest.fixture
def lib():
    # Fresh in-memory catalog for each test
    return Library()

@pytest.fixture
def data_file(tmp_path, monkeypatch):
    # Point the default data file at a per-test location
    path = str(tmp_path / "library_data.json")
    monkeypatch.setattr(settings, "data_file", path)
    monkeypatch.setenv("LIB_CLI_OUTPUT", "plain")
    return path
