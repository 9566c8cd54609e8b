"""Presentation-layer adapters for the supported chat platforms."""

from docchat.platforms.base import PlatformAdapter, PlatformMessage
from docchat.platforms.line import LineAdapter
from docchat.platforms.web import WebAdapter

__all__ = ["LineAdapter", "PlatformAdapter", "PlatformMessage", "WebAdapter"]
