from .store import BoundedStore

__all__ = ["BoundedStore"]
