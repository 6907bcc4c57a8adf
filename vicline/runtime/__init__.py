"""Runtime composition: settings, event loop and the interactive app.

Entry points are imported lazily; ``vicline.cmdline`` depends on
``vicline.runtime.config`` and eager imports here would form a cycle.
"""

from __future__ import annotations


def build_context(*args, **kwargs):
    """Lazily import the context builder to avoid package-import cycles."""
    from .context import build_context as _build_context

    return _build_context(*args, **kwargs)


def run_app(*args, **kwargs):
    """Lazily import the interactive entrypoint."""
    from .app import run_app as _run_app

    return _run_app(*args, **kwargs)


__all__ = ["build_context", "run_app"]
