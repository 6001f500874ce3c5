"""
FastAPI app for the Endless Forge API gateway
Run with: uvicorn gateway.main:app --reload --port 3000
"""
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from gateway import config
from gateway.limiter import limiter
from gateway.logging_config import get_logger
from gateway.routes import contact_router, profile_router

logger = get_logger("main")

STARTED_AT = time.monotonic()

app = FastAPI(title="Endless Forge API Gateway", version="1.0.0")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key"],
)

app.include_router(profile_router)
app.include_router(contact_router)


def uptime() -> float:
    return round(time.monotonic() - STARTED_AT, 3)


@app.get("/health")
def health():
    return {"status": "OK", "uptime": uptime()}


@app.get("/")
def root():
    return {"status": "Endless Forge API gateway", "uptime": uptime()}


def run():
    import uvicorn

    logger.info(f"Server running on port {config.PORT}")
    uvicorn.run("gateway.main:app", host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    run()
