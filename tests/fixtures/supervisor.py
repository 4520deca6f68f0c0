"""
Supervisor fixtures for testing.

Controllers use a short grace period so escalation tests stay fast. Every
controller is shut down at teardown so no child or reaper outlives its test.
"""

from collections.abc import Generator

import pytest

from respawner.lifecycle import LifecycleController
from respawner.log import Logger
from respawner.state import SupervisorState

TEST_GRACE_PERIOD = 0.5
TEST_GRACE_POLL = 0.05


@pytest.fixture
def state() -> SupervisorState:
    return SupervisorState()


@pytest.fixture
def controller(
    state: SupervisorState, lg: Logger
) -> Generator[LifecycleController, None, None]:
    ctl = LifecycleController(
        state, lg, grace_period=TEST_GRACE_PERIOD, grace_poll=TEST_GRACE_POLL
    )
    yield ctl
    ctl.shutdown()
