"""CORS restricted to the browser-facing API routes."""

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class PathScopedCORSMiddleware:
    """
    Apply ``CORSMiddleware`` only to requests under ``path_prefix``.

    The LINE webhook and the operational endpoints are server-to-server and
    get no CORS headers.
    """

    def __init__(self, app: ASGIApp, path_prefix: str, **cors_options) -> None:
        self.app = app
        self.path_prefix = path_prefix.rstrip("/")
        self.cors = CORSMiddleware(app, **cors_options)

    def _applies(self, path: str) -> bool:
        return path == self.path_prefix or path.startswith(f"{self.path_prefix}/")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and self._applies(scope.get("path", "")):
            await self.cors(scope, receive, send)
        else:
            await self.app(scope, receive, send)
