# stores/models/__init__.py

from .store import Store

__all__ = ["Store"]
