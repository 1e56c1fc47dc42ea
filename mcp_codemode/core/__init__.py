"""Core proxy application."""

from .manager import INTERFACES_URI, CodemodeProxy

__all__ = ["CodemodeProxy", "INTERFACES_URI"]
