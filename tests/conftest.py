"""
Shared fixtures for Flowline Core tests
"""
import shutil
import tempfile

import pytest

from src.core.container import ServiceContainer
from src.storage import LocalJSONStorage


@pytest.fixture
def temp_storage():
    """Create a temporary storage for testing (completely isolated)"""
    temp_dir = tempfile.mkdtemp(prefix='flowline_test_')
    yield LocalJSONStorage(storage_path=temp_dir)
    # Cleanup: remove entire temp directory
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def container(temp_storage):
    return ServiceContainer(storage=temp_storage, mode='solo')
