"""Request dispatch — build selection, caching policy, preload headers.

Two entry points share the same steps:

``entrypoint``
    The app shell for a build (its versioned ``index.html`` or any
    route caught by ``/``). Never long-cached: it names versioned
    sub-resources and must be revalidated.

``static``
    Anything under the version prefix. Content-addressed, so cached
    forever, except for the service worker which browsers must be able
    to update.

Both classify the client, pick the first build it can run, and attach
that build's ``Link: rel=preload`` headers (plus HTTP/2 pushes when the
transport and the push policy allow).
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from prpl._internal.invoke import invoke
from prpl.builds import Build, BuildRegistry
from prpl.classify import Classifier, no_capabilities
from prpl.errors import HTTPError, UnsupportedClientError
from prpl.files import FileCache
from prpl.http.content import serve_content
from prpl.http.request import Request
from prpl.http.response import Response
from prpl.static import StaticFiles

logger = logging.getLogger("prpl.server")

CACHE_IMMUTABLE = "public, max-age=31536000, immutable"
CACHE_NEVER = "public, max-age=0"
CACHE_NEVER_PRIVATE = "private, max-age=0"

type PushPredicate = Callable[[Request], bool]


def _with_default_header(response: Response, name: str, value: str) -> Response:
    """Add *name* unless the response already carries it."""
    if response.header(name) is not None:
        return response
    return response.with_header(name, value)


@dataclass(frozen=True, slots=True)
class Dispatcher:
    """Per-request decisions over the frozen build registry.

    Holds only startup-built, read-only state; safe to share across
    concurrent requests.
    """

    builds: BuildRegistry
    files: FileCache
    static_files: StaticFiles
    version_prefix: str = "/static/"
    classifier: Classifier = no_capabilities
    should_push: PushPredicate | None = None
    service_worker: str = "service-worker.js"

    def select_build(self, request: Request) -> Build:
        """Classify the client and return the first build it can run.

        Raises:
            UnsupportedClientError: If no build fits the client.
        """
        capabilities = self.classifier(request.user_agent)
        build = self.builds.find_build(capabilities)
        if build is None:
            logger.info("No build for %r (capabilities %s)", request.user_agent, capabilities)
            raise UnsupportedClientError
        logger.debug("%s %s -> build %r", request.method, request.path, build.name)
        return build

    async def entrypoint(self, request: Request) -> Response:
        """Serve the selected build's entrypoint document."""
        build = self.select_build(request)
        if build.template is None:
            raise HTTPError(status=500, detail=f"Build {build.name!r} has no entrypoint template")
        response = await invoke(build.template.render, request)
        response = _with_default_header(response, "Cache-Control", CACHE_NEVER)
        return self.apply_headers(build, request, request.path, response)

    async def static(self, request: Request) -> Response:
        """Serve an asset from below the version prefix."""
        relative = request.path.removeprefix(self.version_prefix)

        if relative.endswith(self.service_worker):
            policy = (("Service-Worker-Allowed", "/"), ("Cache-Control", CACHE_NEVER_PRIVATE))
        else:
            policy = (("Cache-Control", CACHE_IMMUTABLE),)

        build = self.select_build(request)

        cached = self.files.get(relative)
        if cached is not None:
            response = serve_content(request, relative, cached.data, cached.modified)
        else:
            response = await self.static_files.serve(request, relative)

        for name, value in policy:
            response = _with_default_header(response, name, value)
        return self.apply_headers(build, request, relative, response)

    def apply_headers(
        self,
        build: Build,
        request: Request,
        path: str,
        response: Response,
    ) -> Response:
        """Attach *build*'s preload links for *path* to *response*.

        Every link becomes a ``Link`` header. When the transport supports
        server push and ``should_push`` approves the request, each linked
        resource is also pushed, marked immutable.
        """
        links = build.links_for(path, self.version_prefix)
        if not links:
            return response

        if request.supports_push and self.should_push is not None and self.should_push(request):
            for link in links:
                response = response.with_push(link.path, (("Cache-Control", CACHE_IMMUTABLE),))

        return response.with_headers(("Link", str(link)) for link in links)
