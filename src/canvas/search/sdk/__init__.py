from .client import SearchServiceClient

__all__ = ["SearchServiceClient"]
