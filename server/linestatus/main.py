import uvicorn
from fastapi import Depends, FastAPI, Request

from .config import Settings, get_settings
from .logging_utils import configure_logging
from .routers import status

app = FastAPI(
    title="Line Status",
    version="0.1.0",
    description="Broadband line status page: transfer rates and quota from the provider's info API.",
)


@app.middleware("http")
async def no_store(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("Cache-Control", "no-store")
    return response


@app.on_event("startup")
async def startup_event():
    configure_logging(get_settings())


@app.get("/health")
async def health(settings: Settings = Depends(get_settings)) -> dict:
    return {
        "status": "ok",
        "metrics_enabled": settings.metrics_enabled,
    }


app.include_router(status.router)


def run() -> None:
    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
