"""
Documents Package

Provider functions and the content-server backed document provider.
"""

from .provider import ContentServerDocumentProvider, DocumentProvider
from .registry import DocumentProviderFunc, DocumentProviderRegistry, default_registry

__all__ = [
    "ContentServerDocumentProvider",
    "DocumentProvider",
    "DocumentProviderFunc",
    "DocumentProviderRegistry",
    "default_registry",
]
