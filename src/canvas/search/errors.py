from __future__ import annotations


class SearchGatewayError(Exception):
    """Base error raised by the document index gateway."""


class RegistryError(SearchGatewayError):
    """Raised when the index schema registry is internally inconsistent."""


class UnknownEntityTypeError(SearchGatewayError):
    """Raised when an entity type has no registered index."""


class DocumentTypeError(SearchGatewayError):
    """Raised when a document does not match the model of its target index."""


__all__ = [
    "DocumentTypeError",
    "RegistryError",
    "SearchGatewayError",
    "UnknownEntityTypeError",
]
