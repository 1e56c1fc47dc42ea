"""Tool access filtering."""

from .permission_engine import PermissionEngine

__all__ = ["PermissionEngine"]
