from .gateway import DocumentIndexGateway
from .query import build_search_body

__all__ = ["DocumentIndexGateway", "build_search_body"]
