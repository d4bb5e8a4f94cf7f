import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "clave-de-pruebas"
os.environ["SEED_ON_STARTUP"] = "false"

from datetime import date, datetime, time  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.main import app  # noqa: E402
from app.config.database import Base, SessionLocal, engine  # noqa: E402
from app.core.calificaciones import CategoriaActividad  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.models.actividad import Actividad  # noqa: E402
from app.models.docente import Docente  # noqa: E402
from app.models.estudiante import Estudiante  # noqa: E402
from app.models.gestion import Gestion  # noqa: E402
from app.models.inscripcion import EstadoInscripcion, Inscripcion  # noqa: E402
from app.models.materia import Materia  # noqa: E402
from app.models.paralelo import Paralelo  # noqa: E402


@pytest.fixture(autouse=True)
def tablas():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def curso(db):
    """Paralelo de Programación I con tres estudiantes cursando"""
    docente = Docente(codigo_docente="DOC-001", nombre="María", apellido="Gutiérrez")
    gestion = Gestion(codigo_gestion="GEST-2025-2", semestre=2, año=2025, activa=True)
    materia = Materia(sigla="INF120", nombre="Programación I", nivel=2)
    estudiantes = [
        Estudiante(registro="EST001", nombre="Ana", apellido="Alvarez"),
        Estudiante(registro="EST002", nombre="Bruno", apellido="Benitez"),
        Estudiante(registro="EST003", nombre="Carla", apellido="Castro"),
    ]
    db.add_all([docente, gestion, materia, *estudiantes])
    db.commit()

    paralelo = Paralelo(
        codigo="SA",
        capacidad=30,
        docente_id=docente.id,
        gestion_id=gestion.id,
        materia_id=materia.id,
    )
    db.add(paralelo)
    db.commit()

    inscripciones = [
        Inscripcion(
            estudiante_id=e.id,
            materia_id=materia.id,
            paralelo_id=paralelo.id,
            estado=EstadoInscripcion.TAKING,
        )
        for e in estudiantes
    ]
    db.add_all(inscripciones)
    db.commit()

    return SimpleNamespace(
        docente=docente,
        gestion=gestion,
        materia=materia,
        paralelo=paralelo,
        estudiantes=estudiantes,
        inscripciones=inscripciones,
    )


@pytest.fixture
def crear_actividad(db):
    def _crear(paralelo_id: int, categoria: CategoriaActividad, titulo: str = "Tarea", dia=None):
        actividad = Actividad(
            titulo=titulo,
            descripcion="",
            categoria=categoria,
            fecha_limite=datetime.combine(dia or date(2025, 9, 1), time(7, 0)),
            paralelo_id=paralelo_id,
        )
        db.add(actividad)
        db.commit()
        return actividad

    return _crear


@pytest.fixture
def auth():
    def _auth(identificador: int, rol: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(identificador, rol)}"}

    return _auth


@pytest.fixture
def headers_docente(curso, auth):
    return auth(curso.docente.id, "DOCENTE")


@pytest.fixture
def headers_estudiantes(curso, auth):
    return [auth(e.id, "ESTUDIANTE") for e in curso.estudiantes]
