"""Server launcher.

Starts a pounce ASGI server with the live PRPL app object.
"""


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    workers: int = 1,
    log_level: str = "info",
    ssl_certfile: str | None = None,
    ssl_keyfile: str | None = None,
) -> None:
    """Start a pounce server with the given PRPL app.

    Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``),
    but prpl has a live app object. We use ``pounce.Server``
    directly with the ASGI callable.

    Args:
        app: ASGI callable (PRPL instance).
        host: Bind host address.
        port: Bind port number.
        workers: Worker count (0 = auto-detect from CPU count).
        log_level: Server log level.
        ssl_certfile: TLS certificate; browsers only speak HTTP/2 (and
            so only accept pushes) over TLS.
        ssl_keyfile: TLS private key.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        log_level=log_level,
        ssl_certfile=ssl_certfile,
        ssl_keyfile=ssl_keyfile,
    )
    server = Server(config, app)
    server.run()
