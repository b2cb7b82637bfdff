"""Hypothesis profiles and sandbox fixtures for papernet.

Fixtures hand out a fresh sandbox network per test so that knobs set by
one test (reachability, commit delay, forced validation codes) never
leak into another.
"""

from __future__ import annotations

from typing import Any

import pytest
from hypothesis import HealthCheck, settings

from papernet.infra.sandbox import Sandbox, build_sandbox

# ---------------------------------------------------------------------------
# Hypothesis global settings
# ---------------------------------------------------------------------------

settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.register_profile(
    "dev",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.load_profile("dev")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sandbox() -> Sandbox:
    """Two-organisation network with paper 00001 owned by DigiBank."""
    return build_sandbox()


@pytest.fixture
def empty_sandbox() -> Sandbox:
    """Same network, no papers on the ledger."""
    return build_sandbox(seed_paper=False)


@pytest.fixture
def redeemed_record() -> dict[str, Any]:
    """Contract record of MagnetoCorp paper 00001 after DigiBank redeemed it."""
    return {
        "class": "org.papernet.commercialpaper",
        "key": "MagnetoCorp:00001",
        "currentState": 3,
        "issuer": "MagnetoCorp",
        "paperNumber": "00001",
        "issueDateTime": "2020-05-31",
        "maturityDateTime": "2020-11-30",
        "faceValue": "5000000",
        "owner": "DigiBank",
        "mspid": "Org2MSP",
        "redeemDateTime": "2020-11-30",
    }
