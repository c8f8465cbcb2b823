"""Client classification seam.

Turning a User-Agent string into a ``Capability`` mask is the job of an
external classifier; prpl only defines the call shape::

    def classify(user_agent: str) -> Capability: ...

The default classifies every browser as capable of nothing, so only a
fallback build is served. ``cached_classifier`` memoizes any classifier,
since the same few User-Agent strings make up nearly all traffic.
"""

from collections.abc import Callable
from functools import lru_cache

from prpl.capabilities import Capability

type Classifier = Callable[[str], Capability]


def no_capabilities(user_agent: str) -> Capability:  # noqa: ARG001
    """Default classifier: assume nothing about the browser."""
    return Capability(0)


def cached_classifier(classifier: Classifier, maxsize: int = 1024) -> Classifier:
    """Wrap *classifier* in an LRU cache keyed by User-Agent string."""
    return lru_cache(maxsize=maxsize)(classifier)
