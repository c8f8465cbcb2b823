"""Test utilities for PRPL applications.

    from prpl.testing import TestClient
"""

from prpl.testing.client import TestClient

__all__ = ["TestClient"]
