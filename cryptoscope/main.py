from fastapi import FastAPI

from . import __version__
from .api import health, tools
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

setup_logging()

# Create FastAPI app
app = FastAPI(
    title="Cryptoscope Tools API",
    description="Crypto market and DeFi analytics tools for research agents",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(tools.router, tags=["Tools"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Cryptoscope Tools API",
        "version": __version__,
        "description": "Crypto market and DeFi analytics tools for research agents",
        "docs": "/docs",
        "health": "/healthz",
        "tools": "/tools",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "cryptoscope.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
