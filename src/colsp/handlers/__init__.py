"""handlers/__init__.py: re-export handler functions for convenience."""
from .diagnostics import get_diagnostics
from .hover import get_hover
from .navigation import (
    get_definition,
    get_document_symbols,
    get_prepare_rename,
    get_references,
    get_rename,
)

__all__ = [
    'get_diagnostics', 'get_hover', 'get_definition', 'get_references',
    'get_document_symbols', 'get_prepare_rename', 'get_rename',
]
