"""Main FastAPI application"""
from fastapi import FastAPI
from servicedesk.config import get_settings
from servicedesk.middleware.cors import setup_cors
from servicedesk.middleware.error_handler import ErrorHandlerMiddleware
from servicedesk.services.change_feed import ChangeFeed
from contextlib import asynccontextmanager
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


async def start_realtime_bridge(app: FastAPI):
    """Forward Supabase realtime ticket changes onto the in-process feed"""
    settings = get_settings()
    if not settings.realtime_enabled:
        logger.info("Realtime bridge disabled - only writes made through this API refresh views")
        return None

    from servicedesk.services.realtime_bridge import create_realtime_bridge

    try:
        bridge = await create_realtime_bridge(settings, app.state.change_feed)
    except Exception as e:
        logger.error(f"Failed to start realtime bridge: {e}")
        return None
    return bridge


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    app.state.realtime_bridge = await start_realtime_bridge(app)
    yield
    # Shutdown
    if app.state.realtime_bridge is not None:
        await app.state.realtime_bridge.stop()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Service Desk API",
        description="Support tickets for customers and agents, with live dashboards",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.change_feed = ChangeFeed()
    app.state.realtime_bridge = None

    # Setup CORS
    setup_cors(app, settings)

    # Add error handling middleware
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.environment == "development")

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        bridge = app.state.realtime_bridge
        return {
            "status": "healthy",
            "service": "servicedesk-backend",
            "realtime": "running" if bridge is not None and bridge.running else "stopped",
            "subscribers": app.state.change_feed.subscriber_count
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "Service Desk API",
            "version": "1.0.0",
            "docs": "/docs"
        }

    # Import and include routers
    from servicedesk.routers import auth, tickets, dashboard

    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(tickets.router, prefix="/api/tickets", tags=["Tickets"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
