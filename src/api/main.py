"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.endpoints.images import router as images_router
from src.api.endpoints.payments import payments_api
from src.error_handler import register_exception_handlers
from src.integrations.contracts.interfaces import ImageProvider, OrderLedger, PaymentGateway
from src.integrations.services.image_batch_service import ImageBatchService
from src.integrations.services.payment_flow_service import PaymentFlowService
from src.utils.settings import RelaySettings, load_settings

# Setup logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

SERVICE_NAME = "SSLCommerz Relay API"
SERVICE_VERSION = "1.0.0"


# ============================================================================
# DEPENDENCY SELECTION
# ============================================================================

def _select_ledger(settings: RelaySettings) -> OrderLedger:
    # Real Redis when configured, else the process-local ledger
    if settings.redis_url:
        from src.database.order_ledger_redis import RedisOrderLedger

        logger.info("Order ledger: Redis")
        return RedisOrderLedger(url=settings.redis_url)

    from src.database.order_ledger import InMemoryOrderLedger

    logger.info("Order ledger: in-memory (records are lost on restart)")
    return InMemoryOrderLedger()


def _select_payment_gateway(settings: RelaySettings) -> PaymentGateway:
    if settings.use_mock_gateway:
        from src.integrations.clients.mocks.sslcommerz import MockSSLCommerzClient

        logger.info("Payment gateway: mock SSLCommerz client")
        return MockSSLCommerzClient()

    from src.integrations.clients.real_http.sslcommerz import SSLCommerzClient

    return SSLCommerzClient(
        store_id=settings.sslc_store_id,
        store_password=settings.sslc_store_password,
        sandbox=settings.sslc_sandbox,
        timeout_seconds=settings.gateway_timeout_seconds,
    )


def _select_image_provider(settings: RelaySettings) -> ImageProvider:
    from src.integrations.clients.real_http.pollinations import PollinationsImageClient

    return PollinationsImageClient(
        api_key=settings.pollinations_api_key,
        timeout_seconds=settings.image_timeout_seconds,
    )


# ============================================================================
# APP FACTORY
# ============================================================================

def create_app(
    settings: Optional[RelaySettings] = None,
    ledger: Optional[OrderLedger] = None,
    gateway: Optional[PaymentGateway] = None,
    image_provider: Optional[ImageProvider] = None,
    image_batch: Optional[ImageBatchService] = None,
) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s (sandbox=%s)...", SERVICE_NAME, settings.sslc_sandbox)
        if not settings.sslc_store_id and not settings.use_mock_gateway:
            logger.warning("SSLC_STORE_ID is not set; gateway calls will be rejected")
        yield
        logger.info("Shutting down %s...", SERVICE_NAME)

    app = FastAPI(
        title=SERVICE_NAME,
        description="Relay between the frontend, SSLCommerz and Pollinations.AI",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    ledger = ledger or _select_ledger(settings)
    app.state.settings = settings
    app.state.ledger = ledger
    app.state.payment_flow = PaymentFlowService(
        gateway=gateway or _select_payment_gateway(settings),
        ledger=ledger,
        settings=settings,
    )
    app.state.image_batch = image_batch or ImageBatchService(
        provider=image_provider or _select_image_provider(settings),
        delay_seconds=settings.image_request_delay,
        max_images=settings.max_images,
    )

    register_exception_handlers(app)

    app.include_router(payments_api, prefix="/api/payments", tags=["Payments"])
    app.include_router(images_router, prefix="/api/images", tags=["Images"])

    @app.get("/", tags=["Health"])
    async def root():
        """Health check endpoint."""
        return {"service": SERVICE_NAME, "status": "healthy", "version": SERVICE_VERSION, "timestamp": datetime.now().isoformat()}

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Detailed health check (ledger backend)."""
        return {
            "status": "healthy",
            "ledger": {"backend": type(app.state.ledger).__name__, "connected": app.state.ledger.ping()},
            "sandbox": settings.sslc_sandbox,
            "timestamp": datetime.now().isoformat(),
        }

    return app


app = create_app()
