import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.routers import actuals, companies, forecasts, health, inputs, scenarios, whatif

from app.core.config import settings
from app.jobs.scheduler import dev_router, start_scheduler

log = logging.getLogger(__name__)

app = FastAPI(
    title="Cascata API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS (read from env; defaults to * for dev) ---
origins = [o.strip() for o in (settings.cors_origins or "").split(",")]
if origins == ["*"] or origins == [""]:
    allow_origins = ["*"]
else:
    allow_origins = origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(companies.router)
app.include_router(inputs.router)
app.include_router(forecasts.router)
app.include_router(actuals.router)
app.include_router(whatif.router)
app.include_router(scenarios.router)
app.include_router(dev_router)


@app.get("/")
def root():
    return {
        "name": "cascata",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


# --- Scheduler ---
_scheduler = None

@app.on_event("startup")
def _on_startup():
    global _scheduler
    if not settings.scheduler_enabled:
        return
    try:
        _scheduler = start_scheduler(settings.timezone)
    except Exception as e:
        # In dev, don't crash the app if scheduler fails to start
        log.warning("[cascata] Scheduler start failed: %s", e)


@app.on_event("shutdown")
def _on_shutdown():
    if _scheduler:
        _scheduler.shutdown(wait=False)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
