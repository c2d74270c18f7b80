"""
AYA Token API Application Factory
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..errors import (
    AccountBlacklisted, AlreadyDeployed, AlreadyMinted, TokenError, Unauthorized
)
from .token import router as token_router
from .transfers import router as transfers_router
from .blacklist import router as blacklist_router
from .roles import router as roles_router
from .audit import router as audit_router


ERROR_STATUS = {
    Unauthorized: status.HTTP_403_FORBIDDEN,
    AccountBlacklisted: status.HTTP_403_FORBIDDEN,
    AlreadyDeployed: status.HTTP_409_CONFLICT,
    AlreadyMinted: status.HTTP_409_CONFLICT,
}


async def token_error_handler(request: Request, exc: TokenError) -> JSONResponse:
    """Render a refused token call as {"error", "detail"}"""
    return JSONResponse(
        status_code=ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
        content={"error": exc.code, "detail": str(exc)}
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="AYA Token API",
        description="Fungible token ledger with role-based administration and account blacklist",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TokenError, token_error_handler)

    app.include_router(token_router, tags=["Token"])
    app.include_router(transfers_router, tags=["Transfers"])
    app.include_router(blacklist_router, prefix="/blacklist", tags=["Blacklist"])
    app.include_router(roles_router, prefix="/roles", tags=["Roles"])
    app.include_router(audit_router, prefix="/audit", tags=["Audit"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "aya_token_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "AYA Token API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "token": "/token",
                "accounts": "/accounts/{account}/balance",
                "transfers": "/transfers",
                "approvals": "/approvals",
                "blacklist": "/blacklist",
                "roles": "/roles/{role}/members",
                "audit": "/audit/events",
            }
        }

    return app


app = create_app()
