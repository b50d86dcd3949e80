"""Health check endpoints."""

from pathlib import Path

import falcon.asgi


class HealthResource:
    """Health and readiness endpoints."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = Path(data_dir)

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health - liveness."""
        resp.media = {"status": "ok"}
        resp.status = falcon.HTTP_200

    async def on_get_ready(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health/ready - readiness (data directory present)."""
        if not self._data_dir.is_dir():
            resp.media = {"status": "unavailable", "error": "Data directory missing"}
            resp.status = falcon.HTTP_503
            return
        resp.media = {"status": "ready"}
        resp.status = falcon.HTTP_200
