"""
Upstream publisher registry.
"""

from .registry import SourceDescriptor, SourceRegistry

__all__ = [
    "SourceDescriptor",
    "SourceRegistry",
]
