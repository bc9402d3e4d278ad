import time
import uuid

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse, PlainTextResponse

from callback_server.core.config import get_settings
from callback_server.core.exceptions import (
    AppError,
    app_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from callback_server.core.logging import bind_request_id, configure_logging, get_logger
from callback_server.routers import callback

settings = get_settings()
configure_logging(debug=settings.debug)
log = get_logger(__name__)

app = FastAPI(
    title="Payment Callback Server",
    version="1.0.0",
    default_response_class=ORJSONResponse,
)


@app.middleware("http")
async def request_id_middleware(request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    bind_request_id(request_id)
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    log.info(
        "request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )
    response.headers["X-Request-ID"] = request_id
    return response


app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(callback.router, tags=["callback"])


@app.on_event("startup")
async def startup():
    if settings.sentry_dsn:
        import sentry_sdk
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.1)
        log.info("startup", msg="Sentry enabled")
    if settings.store_backend == "memory":
        from callback_server.repositories.memory import InMemoryLedgerRepository
        app.state.memory_repository = InMemoryLedgerRepository()
        log.warning("startup", msg="Using in-memory store; data is not persisted")
    else:
        from callback_server.db.init import init_db
        app.state.mongo_client = await init_db(settings)
        log.info("startup", msg="DB connected", transactions=settings.mongodb_use_transactions)
    if not settings.tripay_private_key:
        log.error("startup", msg="TRIPAY_PRIVATE_KEY is not set; every callback will be rejected")


@app.on_event("shutdown")
async def shutdown():
    client = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Callback server is alive!"


@app.get("/health")
async def health():
    """Health check for load balancers and monitoring."""
    return {"status": "ok"}


def run() -> None:
    import uvicorn
    uvicorn.run("callback_server.main:app", host=settings.host, port=settings.port)
