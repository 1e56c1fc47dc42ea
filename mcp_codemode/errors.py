"""Error types raised by the codemode proxy."""


class CodemodeError(Exception):
    """Base class for all proxy errors."""


class ConfigError(CodemodeError):
    """Backend configuration could not be read or validated."""


class BackendConnectionError(CodemodeError, ConnectionError):
    """Transport or session handshake to a backend failed."""

    def __init__(self, backend_id: str, message: str):
        super().__init__(f"Connection to {backend_id} failed: {message}")
        self.backend_id = backend_id


class BackendError(CodemodeError):
    """A backend reported an application-level failure."""

    def __init__(self, backend_id: str, message: str):
        super().__init__(f"Backend {backend_id} error: {message}")
        self.backend_id = backend_id


class ToolNotFoundError(CodemodeError, LookupError):
    """Qualified tool name is not present in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Tool {name} not found")
        self.name = name
