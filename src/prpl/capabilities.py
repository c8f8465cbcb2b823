"""Browser capability bit flags.

A capability mask is both what a build *requires* and what a client
*provides*. Matching is pure containment; ``size`` exists only so the
build registry can rank more demanding builds first.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntFlag

from prpl.errors import ConfigurationError


class Capability(IntFlag):
    """Discrete browser features a build may depend on.

    ``Capability(0)`` means "no special requirements" and is served to
    every client.
    """

    ES2015 = 1
    PUSH = 2
    SERVICE_WORKER = 4
    MODULES = 8

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> Capability:
        """Translate project-file tokens (``"es2015"``, ``"push"``...) to a mask.

        Raises:
            ConfigurationError: If a token names no known capability.
        """
        mask = cls(0)
        for token in tokens:
            try:
                mask |= TOKENS[token]
            except (KeyError, TypeError):
                msg = f"Unknown browser capability {token!r}"
                raise ConfigurationError(msg) from None
        return mask

    @property
    def size(self) -> int:
        """Number of capabilities set (population count)."""
        return int(self).bit_count()


TOKENS: dict[str, Capability] = {
    "es2015": Capability.ES2015,
    "push": Capability.PUSH,
    "serviceworker": Capability.SERVICE_WORKER,
    "modules": Capability.MODULES,
}


def can_serve(client: int, requirements: int) -> bool:
    """True if *client* provides every capability in *requirements*."""
    return client & requirements == requirements
