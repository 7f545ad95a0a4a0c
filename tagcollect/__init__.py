"""Collect IR tags into ordered attribute and colour key records."""

from .collector import TagCollector, is_not_source_file
from .records import Attribute, Key

__all__ = ["Attribute", "Key", "TagCollector", "is_not_source_file"]
