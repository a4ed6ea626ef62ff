from .client import BitkubClient

__all__ = ["BitkubClient"]
