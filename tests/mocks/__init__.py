# Mock classes for testing
"""Mock asset registries, value transfer and notifier for testing."""

from .notifier_mock import MockNotifier
from .registry_mock import MockAssetRegistry, MockValueTransfer

__all__ = [
    "MockAssetRegistry",
    "MockValueTransfer",
    "MockNotifier",
]
