"""
Request dispatch engine.

A request flows through the dispatcher, which looks up the rule in the
configuration index, evaluates POST response groups in declared order via
the body matcher, and serves the first match from the resource cache.
"""

from .dispatcher import Dispatcher, NOT_FOUND
from .index import ConfigurationIndex, build_index
from .matcher import BodyMatcher
from .resource_cache import ResourceCache

__all__ = [
    "BodyMatcher",
    "ConfigurationIndex",
    "Dispatcher",
    "NOT_FOUND",
    "ResourceCache",
    "build_index",
]
