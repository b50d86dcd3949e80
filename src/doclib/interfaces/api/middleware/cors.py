"""CORS middleware for browser clients of the library API."""

import falcon
import falcon.asgi

# File responses carry these; a browser hides them unless exposed.
_EXPOSED_HEADERS = ("Content-Disposition", "X-Library-File-Location", "X-Library-Restored")


class CORSMiddleware:
    """Echo allowed origins, answer preflight requests without reaching a resource."""

    def __init__(self, origins: list[str]) -> None:
        self._allow_any = "*" in origins
        self._origins = frozenset(o for o in origins if o != "*")
        self._static_headers = {
            "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
            "Access-Control-Expose-Headers": ", ".join(_EXPOSED_HEADERS),
            "Access-Control-Max-Age": "86400",
        }

    def _allowed(self, origin: str | None) -> bool:
        return bool(origin) and (self._allow_any or origin in self._origins)

    def _apply(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.append_header("Vary", "Origin")
        origin = req.get_header("Origin")
        if not self._allowed(origin):
            return
        resp.set_header("Access-Control-Allow-Origin", origin)
        resp.set_headers(self._static_headers)

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        if req.method == "OPTIONS" and req.get_header("Access-Control-Request-Method"):
            self._apply(req, resp)
            resp.status = falcon.HTTP_204
            resp.complete = True

    async def process_response(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, req_succeeded
    ) -> None:
        if not resp.complete:
            self._apply(req, resp)
