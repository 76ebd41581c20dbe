import logging

import pytest


# The drain loops are backend agnostic; the suite runs them on asyncio only.
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def debug_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture DEBUG records from the ``bstb`` logger hierarchy."""
    caplog.set_level(logging.DEBUG, logger="bstb")
    return caplog
