"""
Pytest configuration and fixtures for share ledger tests.
"""

import pytest

from src.config.models import LedgerConfig
from src.share_ledger.core import (
    BatchWithdrawalCoordinator,
    DepositRateEngine,
    EmergencyDrain,
    ShareRegistry,
    WithdrawalStateMachine,
)
from src.share_ledger.ledger import ShareLedger
from src.share_ledger.models.records import Collection
from src.share_ledger.storage.repository import LedgerRepository
from tests.mocks import MockAssetRegistry, MockNotifier, MockValueTransfer

ADMIN = "0xadmin"
HOLDER = "0xholder"
OTHER = "0xother"
PRIMARY_ADDRESS = "0xprimary"
SECONDARY_ADDRESS = "0xsecondary"

PRIMARY_IDS = [1001, 1002, 1003]
SECONDARY_IDS = [2001, 2002, 2003]
SECONDARY_SHARES = [10, 20, 30]


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def primary_registry() -> MockAssetRegistry:
    """Primary collection with ids 1001-1003 held by HOLDER."""
    registry = MockAssetRegistry(PRIMARY_ADDRESS)
    registry.mint_many(PRIMARY_IDS, HOLDER)
    return registry


@pytest.fixture
def secondary_registry() -> MockAssetRegistry:
    """Secondary collection with ids 2001-2003 held by HOLDER."""
    registry = MockAssetRegistry(SECONDARY_ADDRESS)
    registry.mint_many(SECONDARY_IDS, HOLDER)
    return registry


@pytest.fixture
def transfer() -> MockValueTransfer:
    return MockValueTransfer()


@pytest.fixture
def notifier() -> MockNotifier:
    return MockNotifier()


@pytest.fixture
def config() -> LedgerConfig:
    return LedgerConfig(administrator=ADMIN)


# =============================================================================
# Components
# =============================================================================


@pytest.fixture
def share_registry() -> ShareRegistry:
    """
    Registry holding the reference layout.

    Primary 1001-1003 at 10 shares, secondary 2001-2003 at 10/20/30.
    Total shares: 90.
    """
    registry = ShareRegistry()
    registry.register(Collection.PRIMARY, [(i, 10) for i in PRIMARY_IDS])
    registry.register(Collection.SECONDARY, list(zip(SECONDARY_IDS, SECONDARY_SHARES)))
    return registry


@pytest.fixture
def engine(share_registry: ShareRegistry) -> DepositRateEngine:
    return DepositRateEngine(share_registry)


@pytest.fixture
def funded_engine(engine: DepositRateEngine) -> DepositRateEngine:
    """Engine after a 900 deposit (rate 10)."""
    engine.deposit(900)
    return engine


@pytest.fixture
def machine(share_registry, funded_engine, transfer) -> WithdrawalStateMachine:
    return WithdrawalStateMachine(share_registry, funded_engine, transfer)


@pytest.fixture
def coordinator(share_registry, funded_engine, machine, transfer) -> BatchWithdrawalCoordinator:
    return BatchWithdrawalCoordinator(share_registry, funded_engine, machine, transfer)


@pytest.fixture
def emergency(share_registry, funded_engine, transfer, notifier) -> EmergencyDrain:
    return EmergencyDrain(share_registry, funded_engine, transfer, notifier)


@pytest.fixture
def repository(tmp_path) -> LedgerRepository:
    repo = LedgerRepository(str(tmp_path / "ledger.db"))
    repo.initialize()
    return repo


# =============================================================================
# Ledger
# =============================================================================


@pytest.fixture
def ledger(config, transfer, primary_registry, secondary_registry, notifier) -> ShareLedger:
    """Ledger with both registries bound and nothing registered."""
    return ShareLedger(
        config,
        transfer,
        primary_registry=primary_registry,
        secondary_registry=secondary_registry,
        notifier=notifier,
    )
