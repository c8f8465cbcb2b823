"""PRPL application class.

Mutable during setup (static handler overrides, middleware).
Frozen at startup: builds are loaded, push headers compiled and the
path table built before the first request is served.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from prpl._internal.asgi import Receive, Scope, Send
from prpl.builds import BuildRegistry, load_builds
from prpl.classify import Classifier, no_capabilities
from prpl.config import ProjectConfig, ServerConfig, load_project_config
from prpl.files import FileCache
from prpl.middleware.protocol import Middleware
from prpl.routing.mux import Handler, ServeMux
from prpl.server.dispatch import Dispatcher, PushPredicate
from prpl.server.handler import handle_request
from prpl.static import StaticFiles
from prpl.templates import TemplateFactory, create_default_template

logger = logging.getLogger("prpl.server")


class PRPL:
    """Differential-serving ASGI application.

    Serves each browser the most capable build it supports, with
    preload headers for the resources the requested route needs::

        app = PRPL(
            ServerConfig(root="build", routes={"/view1": "src/my-view1.html"}),
            classifier=my_classifier,
        )

        @app.static_handler("manifest.json")
        def manifest(request):
            return Response(tenant_manifest(request), content_type="application/json")

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one thread loads the builds, even when
        several workers call ``__call__()`` concurrently on first
        request. Everything built by the freeze is read-only afterwards.
    """

    __slots__ = (
        "_classifier",
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_mux",
        "_project",
        "_should_push",
        "_static_handlers",
        "_template_factory",
        "config",
    )

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        project: ProjectConfig | None = None,
        classifier: Classifier = no_capabilities,
        template_factory: TemplateFactory = create_default_template,
        should_push: PushPredicate | None = None,
    ) -> None:
        self.config: ServerConfig = config or ServerConfig()
        self._project = project
        self._classifier = classifier
        self._template_factory = template_factory
        self._should_push = should_push
        self._static_handlers: dict[str, Handler] = {}
        self._middleware_list: list[Middleware] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._dispatcher: Dispatcher | None = None
        self._mux: ServeMux | None = None
        self._middleware: tuple[Middleware, ...] = ()

    # -- Setup --

    def static_handler(self, path: str) -> Callable[[Handler], Handler]:
        """Override how *path* is served inside every build.

        The handler is mounted at ``<version prefix><build>/<path>`` for
        each build and bypasses the file server, e.g. to customise
        ``manifest.json`` per tenant.
        """
        self._check_not_frozen()

        def decorator(func: Handler) -> Handler:
            self._static_handlers[path.lstrip("/")] = func
            return func

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware around the whole dispatch."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Frozen state --

    @property
    def builds(self) -> BuildRegistry:
        """The ordered builds (loads them if needed)."""
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher.builds

    @property
    def files(self) -> FileCache:
        """Entrypoint documents cached at startup."""
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher.files

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Load the builds and serve with pounce."""
        self._ensure_frozen()

        from prpl.server.runner import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            workers=self.config.workers,
            log_level=self.config.log_level,
            ssl_certfile=self.config.ssl_certfile,
            ssl_keyfile=self.config.ssl_keyfile,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._mux is not None

        await handle_request(
            scope,
            receive,
            send,
            mux=self._mux,
            middleware=self._middleware,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Loads the builds on startup so configuration errors surface
        before the server accepts connections.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _load_project(self, root: Path) -> ProjectConfig | None:
        if self._project is not None:
            return self._project
        path = Path(self.config.project_file)
        if not path.is_absolute():
            path = root / path
        if not path.exists():
            logger.warning("Project file %s not found; serving without builds", path)
            return None
        return load_project_config(path)

    def _freeze(self) -> None:
        """Load builds and compile the path table.

        MUST only be called while holding _freeze_lock.
        """
        root = Path(self.config.root)
        prefix = self.config.version_prefix

        # 1. Builds, push headers, entrypoint cache
        builds, files = load_builds(
            self._load_project(root),
            root,
            self.config.routes,
            prefix,
            self._template_factory,
            loader_path=self.config.loader_path,
        )

        dispatcher = Dispatcher(
            builds=builds,
            files=files,
            static_files=StaticFiles(root),
            version_prefix=prefix,
            classifier=self._classifier,
            should_push=self._should_push,
            service_worker=self.config.service_worker,
        )

        # 2. Path table: entrypoints and overrides per build, then the
        #    asset subtree and the catch-all route
        mux = ServeMux()
        for build in builds:
            mux.add(prefix + build.entrypoint, dispatcher.entrypoint)
            build_prefix = f"{prefix}{build.name}/" if build.name else prefix
            for path, handler in self._static_handlers.items():
                mux.add(build_prefix + path, handler)
        mux.add(prefix, dispatcher.static)
        if prefix != "/":
            mux.add("/", dispatcher.entrypoint)
        mux.compile()

        self._dispatcher = dispatcher
        self._mux = mux
        self._middleware = tuple(self._middleware_list)
        self._frozen = True

        logger.info(
            "Serving %d build(s) from %s under %s: %s",
            len(builds),
            root,
            prefix,
            ", ".join(repr(b.name) for b in builds),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register static handlers and middleware before calling app.run()."
            )
            raise RuntimeError(msg)
