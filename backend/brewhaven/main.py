import logging
import os
from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from brewhaven.api.health import router as health_router
from brewhaven.api.routes_admin import router as admin_router
from brewhaven.api.routes_cart import router as cart_router
from brewhaven.api.routes_catalogue import router as catalogue_router
from brewhaven.api.routes_chat import router as chat_router
from brewhaven.api.routes_order import router as order_router
from brewhaven.api.routes_profile import router as profile_router
from brewhaven.config import settings
from brewhaven.db import SessionLocal, init_db
from brewhaven.services.cart_service import CartService

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
log = logging.getLogger("brewhaven")


def purge_carts_job():
    db = SessionLocal()
    try:
        CartService(db).purge_stale(settings.CART_TTL_SECONDS)
    except Exception:
        log.exception("cart purge job failed")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    init_db(reset=os.environ.get("RESET_DB", "0").lower() in ("1", "true", "yes"))

    # scheduler for abandoned cart sessions
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        purge_carts_job,
        "interval",
        seconds=settings.CART_PURGE_INTERVAL_SECONDS,
        id="purge_cart_sessions",
    )
    scheduler.start()
    log.info("BrewHaven backend started")

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)


app = FastAPI(title="BrewHaven - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(catalogue_router, prefix="/api/products", tags=["catalogue"])

app.include_router(cart_router, tags=["cart"])

app.include_router(order_router, prefix="/api/orders", tags=["orders"])

app.include_router(admin_router, tags=["admin"])

app.include_router(chat_router, tags=["chat"])

app.include_router(profile_router, tags=["profile"])
