import pytest

from tierlist_builder.core import log as log_module


@pytest.fixture(autouse=True)
def _isolated_log_file(tmp_path):
    previous = log_module.set_log_file(tmp_path / "tierlist_builder.log")
    yield tmp_path / "tierlist_builder.log"
    log_module.set_log_file(previous)
