# main.py
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from config import Settings, load_settings
from database import open_customer_service
from Services.customer_router import router as customer_router
from Services.errors import CustomerServiceError
import logging

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)

    # Open the store at startup and close it at shutdown
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Initializing database...")
        try:
            async with open_customer_service(settings) as service:
                app.state.customer_service = service
                logger.info("Customer service ready")
                yield
        except Exception as e:
            logger.error(f"Customer service failed: {e}", exc_info=True)
            raise

    app = FastAPI(
        title="Customers API",
        description="""
        API for managing customer records:
        - Lookup by id and listing (all or active only)
        - Create or update by phone number
        - Block, unblock and remove
        """,
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service errors carry only their kind over the wire
    @app.exception_handler(CustomerServiceError)
    async def customer_service_error_handler(request: Request, exc: CustomerServiceError):
        logger.info(f"{request.url.path} answered {exc.status.value} ({exc.kind.value})")
        return JSONResponse(
            status_code=exc.status.value,
            content={"detail": exc.status.phrase}
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        logger.error(f"Error processing request: {exc}", exc_info=True)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value,
            content={"detail": HTTPStatus.INTERNAL_SERVER_ERROR.phrase}
        )

    # Include routers
    app.include_router(customer_router)

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to Customers API",
            "version": VERSION,
            "docs_url": "/docs",
            "redoc_url": "/redoc"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
