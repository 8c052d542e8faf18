import pytest

from scalargrad import engine


@pytest.fixture(autouse=True)
def restore_config():
    saved = engine.get_config()
    yield
    engine._CONFIG.clear()
    engine._CONFIG.update(saved)
