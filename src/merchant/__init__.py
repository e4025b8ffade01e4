"""Merchant package."""

from .notify_handler import (
    LogisticsNotify,
    ReverseLogisticsNotify,
    BUCKETS,
)

__all__ = [
    # Notifications
    "LogisticsNotify",
    "ReverseLogisticsNotify",
    "BUCKETS",
]
