"""
Tracking - TrackingMore client and response normalization
"""

from .client import TrackingClient
from .status import STATUS_MAP, map_status

__all__ = [
    "TrackingClient",
    "STATUS_MAP",
    "map_status",
]
