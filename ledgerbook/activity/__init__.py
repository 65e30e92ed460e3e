"""Activity logging package."""

from ledgerbook.activity.logger import ActivityLogger, get_logger

__all__ = ["ActivityLogger", "get_logger"]
