"""Tool aggregation, naming and invocation routing."""

from .aggregator import CatalogAggregator
from .naming import qualify, sanitize, split_qualified
from .registry import InvocationDescriptor, QualifiedTool, Registry
from .router import InvocationRouter

__all__ = [
    "CatalogAggregator",
    "InvocationRouter",
    "Registry",
    "QualifiedTool",
    "InvocationDescriptor",
    "sanitize",
    "qualify",
    "split_qualified",
]
