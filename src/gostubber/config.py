from __future__ import annotations

import os


def go_binary() -> str:
    """Return the `go` executable used by the source resolver.

    Override with `GOSTUBBER_GO`.
    """
    return os.environ.get("GOSTUBBER_GO") or "go"


def default_formatter_name() -> str:
    """Return the formatter used when none is requested (`GOSTUBBER_FORMATTER`)."""
    return os.environ.get("GOSTUBBER_FORMATTER") or "gofmt"


def default_build_tag() -> str | None:
    """Return the build tag that excludes generated stubs.

    Override with `GOSTUBBER_BUILD_TAG`; an empty value disables the constraint.
    """
    value = os.environ.get("GOSTUBBER_BUILD_TAG")
    if value is None:
        return "nostubs"
    value = value.strip()
    return value or None
