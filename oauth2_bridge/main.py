"""
OAuth2 bridge application: token and revocation endpoints backed by the given
authorization server, plus a health check.
"""
from fastapi import FastAPI

from oauth2_bridge.routes import build_router


def create_app(server) -> FastAPI:
    """Build the app around an authorization server (see routes.build_router for its interface)."""
    app = FastAPI(title="OAuth2 Bridge", version="0.1.0")
    app.include_router(build_router(server), tags=["oauth2"])

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "ok", "service": "oauth2_bridge"}

    return app
