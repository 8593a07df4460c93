"""
=============================================================================
HANDLERS MODULE
=============================================================================

The request-to-resource pipeline:

    request-target ──► PathResolver ──► ResolvedResource
                                             │
                                             ▼
                       ContentDispatcher ──► RequestOutcome + bytes on the
                                             ResponseStream

1. PathResolver (resolver.py)
   - Strips the query string, decodes the path once
   - Rejects traversal, keeps every path inside the public root
   - Directory / extension-less requests fall back to the index file

2. ContentDispatcher (dispatcher.py)
   - 404 for anything missing or unreadable
   - Static files streamed with their MIME type
   - Dynamic scripts executed in-process as text/html
=============================================================================
"""

from .resolver import PathResolver, ResolvedResource, PathTraversalError
from .dispatcher import ContentDispatcher, DYNAMIC_CONTENT_TYPE

__all__ = [
    "PathResolver",
    "ResolvedResource",
    "PathTraversalError",
    "ContentDispatcher",
    "DYNAMIC_CONTENT_TYPE",
]
