"""Pytest configuration and shared fixtures for exchange tests.

This module provides:
- Pytest markers for test categorization
- Shared fixtures for a default curve market
- Fixtures for the pinned regression curve
"""

import logging
from dataclasses import replace

import pytest

from hook_amm.config import DEFAULT_SETTINGS
from hook_amm.exchange.events import EventLog
from tests.fixtures.curve_fixtures import (
    REGRESSION_SUPPLY,
    REGRESSION_VIRTUAL_SOL,
    REGRESSION_VIRTUAL_TOKEN,
    CurveMarket,
    RecordingTransfer,
    create_exchange,
    create_market,
    open_curve,
)


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "economic: Pricing and accounting property tests"
    )
    config.addinivalue_line(
        "markers", "edge_case: Edge case and boundary tests with extreme inputs"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests spanning multiple components"
    )
    config.addinivalue_line(
        "markers", "slow: Tests taking more than 5 seconds to run"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location and name."""
    for item in items:
        # Auto-mark edge case tests
        if "edge_case" in item.nodeid or "boundary" in item.name:
            item.add_marker(pytest.mark.edge_case)

        # Auto-mark integration tests
        if any(
            keyword in item.nodeid
            for keyword in ["lifecycle", "simulation", "cli", "storage"]
        ):
            item.add_marker(pytest.mark.integration)

        # Auto-mark economic tests
        if any(keyword in item.nodeid for keyword in ["pricing", "fees", "reserve_state"]):
            item.add_marker(pytest.mark.economic)


# ============================================================================
# Market Fixtures
# ============================================================================


@pytest.fixture
def market() -> CurveMarket:
    """Default curve with 1e15 supply and two funded traders.

    Returns:
        CurveMarket over an InMemoryLedger with an EventLog attached.
    """
    return create_market()


@pytest.fixture
def graduating_market() -> CurveMarket:
    """Default curve that completes once it holds 5 SOL of real reserves."""
    settings = replace(DEFAULT_SETTINGS, graduation_sol_threshold=5_000_000_000)
    return create_market(settings)


@pytest.fixture
def regression_exchange():
    """Exchange over a RecordingTransfer with the regression curve open.

    Returns:
        Tuple of (exchange, transfers, events)
    """
    transfers = RecordingTransfer()
    events = EventLog()
    exchange = create_exchange(transfers=transfers, events=events)
    open_curve(
        exchange,
        initial_supply=REGRESSION_SUPPLY,
        virtual_token_reserves=REGRESSION_VIRTUAL_TOKEN,
        virtual_sol_reserves=REGRESSION_VIRTUAL_SOL,
    )
    return exchange, transfers, events


# ============================================================================
# Seed Fixtures
# ============================================================================


@pytest.fixture
def fixed_seed() -> int:
    """Fixed random seed for deterministic tests.

    Returns:
        42
    """
    return 42


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handler and level changes made by setup_logging during a test."""
    logger = logging.getLogger("hook_amm")
    handlers = logger.handlers[:]
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
