from __future__ import annotations

import pytest

from articlegen.config import load_config
from articlegen.storage import init_db


@pytest.fixture
def config(tmp_path):
    return load_config(
        environ={
            "AG_FIRECRAWL_API_KEY": "fc-test",
            "AG_DATA_DIR": str(tmp_path / "data"),
            "AG_AGENT_POLL_SECONDS": "2",
            "AG_AGENT_MAX_WAIT_SECONDS": "5",
            "AG_POLL_INTERVAL_SECONDS": "3",
        }
    )


@pytest.fixture
def conn(config):
    db = init_db(config)
    yield db
    db.close()
