import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from mangum import Mangum

from api.deps import build_services
from api.users import router as users_router
from bookings.api import router as bookings_router
from core.clock import Clock, utc_now
from core.config import Settings, get_settings
from core.log_config import configure_logging
from credit_ledger.api import router as credits_router
from reviews.api import router as reviews_router
from skills.api import router as skills_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, clock: Clock = utc_now) -> FastAPI:
    settings = settings or get_settings()
    configure_logging("DEBUG" if settings.debug else settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Skill-exchange session bookings and virtual credit ledger",
        version="1.0.0",
    )
    app.state.services = build_services(settings, clock=clock)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Invalid request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.get("/health", tags=["System"])
    def health_check():
        return {
            "status": "healthy",
            "service": "skillink",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(users_router)
    app.include_router(bookings_router)
    app.include_router(credits_router)
    app.include_router(reviews_router)
    app.include_router(skills_router)

    logger.info("%s ready", settings.app_name)
    return app


app = create_app()
handler = Mangum(app)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
