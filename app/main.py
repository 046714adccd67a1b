"""Punto de entrada de la aplicación FastAPI"""
import logging
from functools import partial

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.endpoints import cities, events, restaurants, sponsors
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.db.session import engine, init_db
from app.schemas.common import HealthResponse
from app.services.notifier import ChangeNotifier, Subscription

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Ciudades, patrocinadores y restaurantes con actualizaciones en tiempo real",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Cache-Control"],
)

register_exception_handlers(app)

app.include_router(cities.router, prefix="/api/cities", tags=["Cities"])
app.include_router(sponsors.router, prefix="/api/sponsors", tags=["Sponsors"])
app.include_router(restaurants.router, prefix="/api/restaurants", tags=["Restaurants"])
app.include_router(events.router, prefix="/api", tags=["Events"])


@app.on_event("startup")
async def startup_event():
    """Arranque: tablas y notificador"""
    app.state.notifier = ChangeNotifier(partial(Subscription, max_pending=settings.SSE_MAX_PENDING))
    if settings.INIT_DB:
        await init_db()
    logger.info(f"🚀 {settings.PROJECT_NAME} {settings.VERSION} lista")
    logger.info(f"📡 SSE disponible en /api/events")


@app.on_event("shutdown")
async def shutdown_event():
    app.state.notifier.close()
    await engine.dispose()
    logger.info("👋 Servidor detenido")


@app.get("/")
async def root():
    return {
        "status": "OK",
        "message": "As Gastronómico API funcionando correctamente",
        "version": settings.VERSION,
        "endpoints": {
            "health": "/api/health",
            "cities": "/api/cities",
            "sponsors": "/api/sponsors",
            "restaurants": "/api/restaurants",
            "events": "/api/events",
        },
    }


@app.get("/api/health", response_model=HealthResponse)
async def health():
    return {
        "status": "OK",
        "message": f"API funcionando correctamente - Versión {settings.VERSION}",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
