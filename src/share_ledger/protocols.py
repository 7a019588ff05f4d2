"""
Collaborator Protocols.

Interfaces the ledger consumes but does not implement: the per-collection
asset registry, the value transfer primitive and an optional notifier.
"""

from typing import Protocol


class AssetRegistryProtocol(Protocol):
    """
    Ownership registry for one asset collection.

    ``owner_of`` raises src.core.exceptions.NotFoundError for unknown ids.
    ``address`` is the registry's own identity; for the secondary collection
    it is also the only identity allowed to register secondary assets.
    """

    @property
    def address(self) -> str:
        """Registry identity."""
        ...

    async def owner_of(self, asset_id: int) -> str:
        """Get the current holder of an asset."""
        ...

    async def exists(self, asset_id: int) -> bool:
        """Check whether an asset id exists."""
        ...


class ValueTransferProtocol(Protocol):
    """Moves value out of the pool. Raises if the transfer cannot be made."""

    async def pay(self, amount: int, recipient: str) -> None:
        """Pay ``amount`` units to ``recipient``."""
        ...


class NotifierProtocol(Protocol):
    """Protocol for notification manager interface."""

    async def send_warning(self, title: str, message: str) -> bool: ...
