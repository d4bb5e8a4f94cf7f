import logging
import time

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool

from .settings import settings

logger = logging.getLogger(__name__)


def _crear_engine():
    if settings.es_sqlite:
        # SQLite en memoria comparte una sola conexión entre hilos
        return create_engine(
            settings.database_url_sync,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        settings.database_url_sync,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        connect_args={"options": "-c default_transaction_isolation=read_committed"},
    )


engine = _crear_engine()

# Crear una sesión local
SessionLocal = sessionmaker(
    bind=engine, autocommit=False, autoflush=True, expire_on_commit=False
)

Base = declarative_base()


def get_db() -> Session:
    """Obtener una sesión de base de datos con manejo de errores adecuado"""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def test_connection(max_retries: int = 5, delay: float = 2.0) -> bool:
    for attempt in range(max_retries):
        try:
            with SessionLocal() as session:
                session.execute(text("SELECT 1"))
                session.commit()
                logger.info("Conexión a base de datos exitosa (intento %s)", attempt + 1)
                return True
        except Exception as e:
            logger.warning("Intento %s de conexión fallido: %s", attempt + 1, e)
            if attempt < max_retries - 1:
                time.sleep(delay)
            else:
                logger.error("❌ Todos los intentos de conexión fallaron")
                return False
    return False


def wait_for_db(max_wait: int = 60) -> bool:
    logger.info("Esperando a que la base de datos esté lista...")
    start_time = time.time()

    while True:
        if test_connection(max_retries=1):
            return True

        elapsed = time.time() - start_time
        if elapsed > max_wait:
            logger.error("Tiempo de espera agotado tras %s segundos", max_wait)
            return False

        time.sleep(2)


def init_db():
    # Registrar todos los modelos en el metadata antes de crear tablas
    from app.models import (  # noqa: F401
        actividad,
        asistencia,
        calificacion,
        docente,
        estudiante,
        gestion,
        inscripcion,
        materia,
        paralelo,
    )

    if not wait_for_db():
        raise RuntimeError("La base de datos no está disponible")

    Base.metadata.create_all(bind=engine)
    logger.info("✅ Tablas de base de datos inicializadas")
    return True


def close_db():
    engine.dispose()
    logger.info("Conexiones de base de datos cerradas")
