import atexit
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.router import api_router
from app.config.database import SessionLocal, close_db, init_db
from app.config.settings import settings
from app.core.seeder_sync import run_seeder

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def initialize_app():
    """Inicializar base de datos y datos de demostración"""
    logger.info("🚀 Iniciando ingenIA-Q API v%s...", VERSION)

    # 1. Base de datos
    logger.info("📊 Inicializando base de datos...")
    try:
        init_db()
    except Exception:
        logger.exception("❌ Error crítico en base de datos")
        raise

    # 2. Seeding
    if settings.seed_on_startup:
        logger.info("🌱 Ejecutando seeding...")
        try:
            if run_seeder():
                logger.info("✅ Datos iniciales creados")
            else:
                logger.info("ℹ️ Base de datos ya contiene datos")
        except Exception:
            logger.exception("⚠️ Error en seeding (continuando)")

    logger.info("🎉 Sistema listo!")


# Inicializar la aplicación al importar
initialize_app()

app = FastAPI(
    title="ingenIA-Q API",
    description="""
    ## ingenIA-Q 🎓

    Calificaciones ponderadas y asistencia por paralelo.

    - **Docente**: matriz de notas, actividades, calificación y asistencia diaria
    - **Estudiante**: detalle de cursos, entregas, resumen académico y tutor
    - **Pesos**: Individual 7, Grupal 5, Medio semestre 2, Final 6 (sobre 20)
    """,
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error("❌ Error de base de datos en %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Error interno del servidor"})


@app.get("/", tags=["🏠 General"])
def root():
    """Información general del sistema"""
    return {
        "message": f"ingenIA-Q API v{VERSION}",
        "status": "running",
        "docs": "/docs",
        "environment": settings.environment,
    }


@app.get("/health", tags=["🏠 General"])
def health_check():
    """Verificación de salud (incluye ping a la base de datos)"""
    health_data = {
        "status": "healthy",
        "service": "ingenia-q-api",
        "version": VERSION,
        "database": "ok",
    }

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("⚠️ Health check sin base de datos: %s", e)
        health_data.update({"status": "degraded", "database": "unavailable"})

    return health_data


atexit.register(close_db)
