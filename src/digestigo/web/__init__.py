"""HTTP API for Digestigo."""

import uvicorn


def run(host: str = "127.0.0.1", port: int = 8000):
    """Run the web server."""
    uvicorn.run(
        "digestigo.web.app:app",
        host=host,
        port=port,
        reload=False,
    )


__all__ = ["run"]
