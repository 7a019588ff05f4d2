"""
Mock Notifier for testing.
"""

from datetime import datetime, timezone
from typing import Any, Optional


class MockNotifier:
    """
    Mock Notification Manager.

    Records all notifications for verification in tests.
    Does not actually send any notifications.

    Example:
        >>> notifier = MockNotifier()
        >>> await notifier.send_warning("Emergency Drain", "Pool drained")
        >>> assert notifier.get_last_message()["level"] == "warning"
    """

    def __init__(self, fail: bool = False):
        """
        Initialize mock notifier.

        Args:
            fail: Raise on every send
        """
        self.messages: list[dict[str, Any]] = []
        self.fail = fail

    async def send(self, title: str, message: str, level: str = "info") -> bool:
        if self.fail:
            raise ConnectionError("notifier unavailable")
        self.messages.append({
            "title": title,
            "message": message,
            "level": level,
            "timestamp": datetime.now(timezone.utc),
        })
        return True

    async def send_warning(self, title: str, message: str) -> bool:
        """Send warning level notification."""
        return await self.send(title, message, level="warning")

    def get_last_message(self) -> Optional[dict[str, Any]]:
        if self.messages:
            return self.messages[-1]
        return None

    def get_messages_by_level(self, level: str) -> list[dict[str, Any]]:
        return [m for m in self.messages if m.get("level") == level]
