"""Routing — exact-path and subtree matching.

Patterns are registered while the app freezes and compiled into an
immutable lookup structure before the first request.
"""

from prpl.routing.mux import Route, ServeMux

__all__ = ["Route", "ServeMux"]
