from .snapshot import StoreSnapshot
__all__ = ["StoreSnapshot"]
