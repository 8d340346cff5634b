"""FuelCoach MCP Server - Entry point.

Runs the MCP server with HTTP transport behind an upstream auth proxy.
Uses Starlette with the MCP HTTP app for maximum compatibility.
"""

import logging
import os

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route, Mount

from .shell.mcp_server import mcp, current_profile_id


logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

PROFILE_HEADER = "X-Profile-Id"
DEFAULT_ALLOWED_ORIGINS = "http://localhost:5173"


# ==================== Route Handlers ====================


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "healthy", "service": "fuelcoach-mcp"})


# ==================== Profile Middleware ====================


class ProfileContextMiddleware(BaseHTTPMiddleware):
    """Bind the profile for MCP requests.

    Authentication happens upstream; the proxy forwards the authenticated
    profile id in the X-Profile-Id header.
    """

    async def dispatch(self, request: Request, call_next):
        # Skip non-MCP routes
        if not request.url.path.startswith("/mcp"):
            return await call_next(request)

        profile_id = request.headers.get(PROFILE_HEADER, "").strip()
        if not profile_id:
            logger.warning("MCP request without %s header", PROFILE_HEADER)
            return JSONResponse({"error": f"{PROFILE_HEADER} header required"}, status_code=401)

        token = current_profile_id.set(profile_id)
        logger.debug("Bound profile: %s", profile_id[:8])
        try:
            return await call_next(request)
        finally:
            current_profile_id.reset(token)


# ==================== Create ASGI App ====================


def allowed_origins() -> list[str]:
    raw = os.environ.get("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app() -> Starlette:
    """Create the Starlette application with MCP at root.

    The MCP streamable_http_app() handles /mcp/ internally when mounted at root.
    We use its lifespan context to ensure proper initialization.
    """
    mcp_app = mcp.streamable_http_app()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        # Mount MCP app at root - it handles /mcp/ path internally
        Mount("/", app=mcp_app),
    ]

    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=allowed_origins(),
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
            Middleware(ProfileContextMiddleware),
        ],
        lifespan=mcp_app.router.lifespan_context,
    )

    return app


# Create app at module level for the ASGI server
app = create_app()


def main() -> None:
    """Run the server."""
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("HOST", "0.0.0.0")

    logger.info("Starting FuelCoach MCP server on %s:%d", host, port)

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
