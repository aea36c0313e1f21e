# main.py
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from billing_route import router as billing_router
from business_settings import SettingsCache
from customers_route import router as customers_router
from dashboard_route import router as dashboard_router
from db import default_stores
from deliveries_route import router as deliveries_router
from errors import register_error_handlers
from settings_route import router as settings_router
from stock_route import router as stock_router, sources_router

logging.basicConfig(
  level=config.LOG_LEVEL,
  format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("dairy")


def create_app(stores=None) -> FastAPI:
  stores = stores if stores is not None else default_stores()
  started = time.monotonic()

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    stores.init()
    with stores.open() as store:
      app.state.settings.load(store)
    logger.info("dairy backend ready (store=%s, env=%s)", stores.name, config.APP_ENV)
    yield

  app = FastAPI(title="Dairy Delivery Backend", version="1.0.0", lifespan=lifespan)
  app.state.stores = stores
  app.state.settings = SettingsCache()

  app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
  )
  register_error_handlers(app)

  @app.get("/health")
  def health():
    return {
      "status": "healthy",
      "timestamp": datetime.now(timezone.utc).isoformat(),
      "uptime": round(time.monotonic() - started, 3),
    }

  api = APIRouter(prefix="/api")
  api.include_router(customers_router)
  api.include_router(deliveries_router)
  api.include_router(stock_router)
  api.include_router(sources_router)
  api.include_router(billing_router)
  api.include_router(dashboard_router)
  api.include_router(settings_router)
  app.include_router(api)
  return app


app = create_app()


def serve() -> None:
  uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
  serve()
