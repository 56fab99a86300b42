# recipe_capture API Main Entry Point
import logging
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .settings import settings
from .core.errors import AcquisitionFailed, InvalidAcquisitionMode, UnsupportedPlatform
from .schemas import ErrorOut
from .routers.ready import router as ready_router
from .routers.parse_url import router as parse_url_router
from .routers.ingredients import router as ingredients_router
from .routers.units import router as units_router

# Configure structured logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("recipe_capture")

# Rate limiter (per-IP)
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])

app = FastAPI(title="Recipe Capture API", version="0.1.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UnsupportedPlatform)
async def unsupported_platform_handler(request: Request, exc: UnsupportedPlatform):
    logger.info(f"Rejected url: {exc}")
    return JSONResponse(status_code=400, content=ErrorOut(error=exc.reason).model_dump(mode="json"))


@app.exception_handler(InvalidAcquisitionMode)
async def invalid_mode_handler(request: Request, exc: InvalidAcquisitionMode):
    return JSONResponse(status_code=400, content=ErrorOut(error=exc.reason).model_dump(mode="json"))


@app.exception_handler(AcquisitionFailed)
async def acquisition_failed_handler(request: Request, exc: AcquisitionFailed):
    body = ErrorOut(error=exc.message, platform=exc.platform, stages=exc.stages)
    return JSONResponse(status_code=422, content=body.model_dump(mode="json"))


app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(parse_url_router, prefix="/api", tags=["acquisition"])
app.include_router(ingredients_router, prefix="/api/ingredients", tags=["ingredients"])
app.include_router(units_router, prefix="/api/units", tags=["units"])
