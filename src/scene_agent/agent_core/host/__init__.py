"""Interface of the host environment the tools operate on."""

from .protocol import EntityState, HostEnvironment

__all__ = ["EntityState", "HostEnvironment"]
