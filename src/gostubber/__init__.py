"""gostubber: generate stubbed implementations of Go interfaces."""

from __future__ import annotations

from . import errors
from .generate import GenerateOptions, generate_files, run
from .resolver.scan import GoSourceResolver

__all__ = [
    "GenerateOptions",
    "GoSourceResolver",
    "errors",
    "generate_files",
    "run",
]
