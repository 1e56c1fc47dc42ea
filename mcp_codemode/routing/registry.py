"""Registry produced by one aggregation pass."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..config.models import BackendConfig
from ..errors import ToolNotFoundError
from .naming import split_qualified


@dataclass(frozen=True)
class InvocationDescriptor:
    """Where a qualified tool lives: the backend and its backend-local name."""

    backend_id: str
    tool_name: str


@dataclass
class QualifiedTool:
    """A backend tool exposed under its qualified name."""

    name: str
    backend_id: str
    raw_name: str
    description: Optional[str] = None
    input_schema: Optional[Dict[str, Any]] = None

    @property
    def namespace(self) -> str:
        return split_qualified(self.name)[0]

    @property
    def function(self) -> str:
        return split_qualified(self.name)[1]

    @property
    def descriptor(self) -> InvocationDescriptor:
        return InvocationDescriptor(self.backend_id, self.raw_name)


@dataclass
class Registry:
    """Dispatch map, flat catalog, and backend index of the aggregated tools.

    Built wholesale by ``CatalogAggregator.aggregate`` and treated as
    read-only afterwards; a new aggregation pass produces a new registry.
    """

    dispatch: Dict[str, Dict[str, InvocationDescriptor]] = field(default_factory=dict)
    tools: List[QualifiedTool] = field(default_factory=list)
    backends: Dict[Tuple[str, str], BackendConfig] = field(default_factory=dict)
    interfaces: str = ""
    failures: Dict[str, str] = field(default_factory=dict)

    def resolve(self, qualified_name: str) -> InvocationDescriptor:
        """Map a qualified name back to its backend and raw tool name."""
        try:
            namespace, function = split_qualified(qualified_name)
        except ValueError:
            raise ToolNotFoundError(qualified_name) from None

        descriptor = self.dispatch.get(namespace, {}).get(function)
        if descriptor is None:
            raise ToolNotFoundError(qualified_name)
        return descriptor

    def lookup(self, backend_id: str, tool_name: str) -> BackendConfig:
        """Return the configuration of the backend serving a raw tool."""
        cfg = self.backends.get((backend_id, tool_name))
        if cfg is None:
            raise ToolNotFoundError(f"{backend_id}.{tool_name}")
        return cfg

    def get_stats(self) -> Dict[str, Any]:
        """Get registry statistics."""
        return {
            "tools": len(self.tools),
            "namespaces": len(self.dispatch),
            "failed_backends": sorted(self.failures),
        }
