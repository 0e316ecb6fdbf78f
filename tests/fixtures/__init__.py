"""Test fixtures for bonding curve exchange testing."""

from tests.fixtures.curve_fixtures import (
    CurveMarket,
    CurveStateSnapshot,
    RecordingTransfer,
    assert_custody_matches_state,
    create_exchange,
    create_market,
    open_curve,
    snapshot_market,
)

__all__ = [
    "CurveMarket",
    "CurveStateSnapshot",
    "RecordingTransfer",
    "assert_custody_matches_state",
    "create_exchange",
    "create_market",
    "open_curve",
    "snapshot_market",
]
