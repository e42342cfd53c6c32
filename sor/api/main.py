"""FastAPI application for the smart order router."""

import os

import uvicorn
from fastapi import FastAPI

from sor import __version__
from sor.api.endpoints import router
from sor.logging import configure_logging

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("SOR_HOST", "0.0.0.0")
PORT = int(os.environ.get("SOR_PORT", "8000"))
DEBUG = os.environ.get("SOR_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="Smart Order Router (Python)",
    description="Multi-path swap routing across weighted, stable and element pools",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the router API server.

    Configuration via environment variables:
    - SOR_HOST: Host to bind to (default: 0.0.0.0)
    - SOR_PORT: Port to bind to (default: 8000)
    - SOR_DEBUG: Enable debug logging and reload mode (default: false)
    - SOR_POOLS_URL: Pool discovery URL (default: none, no pools)
    """
    configure_logging("DEBUG" if DEBUG else "INFO")
    uvicorn.run(
        "sor.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
