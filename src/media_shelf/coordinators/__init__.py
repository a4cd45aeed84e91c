"""Coordinators - Orchestration layer connecting callers with scanning and caching."""

from .library_coordinator import LibraryCoordinator

__all__ = ["LibraryCoordinator"]
