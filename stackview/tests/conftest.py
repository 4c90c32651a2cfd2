import pytest

from .utils import zipfile_path, FakeRenderer


@pytest.fixture
def renderer():
    return FakeRenderer()
