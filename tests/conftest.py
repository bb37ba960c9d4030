# tests/conftest.py
import logging
from datetime import date

import pytest

from cpm_core.services.scheduling import SchedulingEngine, SchedulingPolicy


PROJECT_START = date(2024, 1, 1)


@pytest.fixture
def policy():
    return SchedulingPolicy()


@pytest.fixture
def engine(policy):
    # explicit default start keeps results independent of the day the suite runs
    return SchedulingEngine(policy=policy, default_start=PROJECT_START)


@pytest.fixture
def flagging_engine():
    return SchedulingEngine(
        policy=SchedulingPolicy(invalid_dates="flag"),
        default_start=PROJECT_START,
    )


@pytest.fixture
def cpm_logger():
    logger = logging.getLogger("cpm_core")
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    try:
        yield logger
    finally:
        for handler in logger.handlers:
            if handler not in saved_handlers:
                handler.close()
        logger.handlers[:] = saved_handlers
        logger.setLevel(saved_level)
