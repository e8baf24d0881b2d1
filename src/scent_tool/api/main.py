import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scent_tool import __version__
from scent_tool.config.settings import configure_logging
from scent_tool.api.pricing_api import router as pricing_router
from scent_tool.api.records_api import products_router, others_router, orders_router
from scent_tool.api.state import AppState, get_state


configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Scent Tool API",
    description="Backend API for the attar & perfume shop dashboard",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(products_router)
app.include_router(others_router)
app.include_router(orders_router)
app.include_router(pricing_router)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Errors keep the {success, error} envelope the dashboard reads."""
    if isinstance(exc.detail, dict):
        body = {"success": False, "error": "Validation failed", **exc.detail}
    else:
        body = {"success": False, "error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = ".".join(str(part) for part in (loc[1:] if len(loc) > 1 else loc))
        errors[name or "body"] = err.get("msg", "Invalid value")
    return JSONResponse(status_code=422, content={"success": False, "error": "Validation failed", "errors": errors})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.exception("Unhandled value error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


@app.get("/")
async def root():
    return {"status": "online", "message": "Scent Tool API Active"}


@app.get("/system/status")
async def get_status(state: AppState = Depends(get_state)):
    settings = state.settings
    return {
        "engine_active": True,
        "data_dir": str(settings.data_dir),
        "schedule_source": str(settings.markup_schedule) if settings.markup_schedule else "default",
        "slots": list(state.engine.slot_labels),
        "counts": state.stores.counts(),
    }
