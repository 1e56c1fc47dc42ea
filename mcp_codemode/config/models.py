"""Configuration data models."""

from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, Field, model_validator

from .adaptation import expand_mapping


class ToolFilterConfig(BaseModel):
    allow: Optional[List[str]] = None
    deny: Optional[List[str]] = None


class BackendConfig(BaseModel):
    identifier: str = ""  # filled from the key under `servers`
    url: Optional[str] = None  # streamable HTTP endpoint
    command: Optional[str] = None  # stdio subprocess
    args: List[str] = Field(default_factory=list)
    headers: Optional[Dict[str, str]] = None
    env: Optional[Dict[str, str]] = None
    allow: Optional[List[str]] = None  # takes precedence over deny
    deny: Optional[List[str]] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_codemode_block(cls, data: Any) -> Any:
        """Accept the nested ``codemode: {allow, deny}`` form."""
        if isinstance(data, dict) and isinstance(data.get("codemode"), dict):
            data = dict(data)
            block = ToolFilterConfig(**data.pop("codemode"))
            data.setdefault("allow", block.allow)
            data.setdefault("deny", block.deny)
        return data

    @model_validator(mode="after")
    def _require_transport(self) -> "BackendConfig":
        if not self.url and not self.command:
            raise ValueError("either 'url' or 'command' must be set")
        return self

    @property
    def transport(self) -> Literal["streamable_http", "stdio"]:
        return "streamable_http" if self.url else "stdio"

    def expanded(self, environ: Optional[Mapping[str, str]] = None) -> "BackendConfig":
        """Return a copy with ``${VAR}`` placeholders in headers and env resolved."""
        return self.model_copy(
            update={
                "headers": expand_mapping(self.headers, environ),
                "env": expand_mapping(self.env, environ),
            }
        )


class ProxySettings(BaseModel):
    name: str = "codemode"
    version: str = "1.0.0"
    log_level: Literal["debug", "info", "warning", "error"] = "info"
    discovery_timeout: Optional[float] = None  # seconds; None waits for every backend


class CodemodeConfig(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    servers: Dict[str, BackendConfig] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _assign_identifiers(self) -> "CodemodeConfig":
        for backend_id, backend in self.servers.items():
            backend.identifier = backend_id
        return self
