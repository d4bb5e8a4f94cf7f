from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_estudiante
from app.config.database import get_db
from app.core import servicio_academico, tutor_ia
from app.core.resultados import resolver
from app.core.security import Identidad
from app.schemas.calificacion import Calificacion, EntregaCreate
from app.schemas.inscripcion import (
    BajaInscripcion,
    InscripcionRealizada,
    SolicitudInscripcion,
)
from app.schemas.reporte import CursoEstudiante, DetalleCursoEstudiante, ResumenAcademico
from app.schemas.tutor import PreguntaTutor, RespuestaTutor

router = APIRouter()


@router.get("/cursos", response_model=List[CursoEstudiante])
def get_mis_cursos(
    db: Session = Depends(get_db),
    estudiante: Identidad = Depends(require_estudiante),
):
    """Cursos de la gestión activa con la nota acumulada"""
    return resolver(servicio_academico.cursos_estudiante(db, estudiante.id))


@router.get("/cursos/{paralelo_id}", response_model=DetalleCursoEstudiante)
def get_detalle_curso(
    paralelo_id: int,
    db: Session = Depends(get_db),
    estudiante: Identidad = Depends(require_estudiante),
):
    return resolver(
        servicio_academico.detalle_curso_estudiante(db, estudiante.id, paralelo_id)
    )


@router.post("/entregas", response_model=Calificacion)
def submit_entrega(
    entrega_in: EntregaCreate,
    db: Session = Depends(get_db),
    estudiante: Identidad = Depends(require_estudiante),
):
    """Registrar el enlace de una entrega; la nota existente se conserva"""
    return resolver(servicio_academico.registrar_entrega(db, estudiante.id, entrega_in))


@router.get("/resumen", response_model=ResumenAcademico)
def get_resumen(
    db: Session = Depends(get_db),
    estudiante: Identidad = Depends(require_estudiante),
):
    return resolver(servicio_academico.resumen_academico(db, estudiante.id))


@router.post("/inscripciones", response_model=InscripcionRealizada, status_code=201)
def inscribirse(
    solicitud: SolicitudInscripcion,
    db: Session = Depends(get_db),
    estudiante: Identidad = Depends(require_estudiante),
):
    """Inscribirse a un paralelo (el estudiante actual)"""
    return resolver(
        servicio_academico.inscribir(db, estudiante.id, solicitud.paralelo_id)
    )


@router.delete("/inscripciones/{paralelo_id}", response_model=BajaInscripcion)
def abandonar_curso(
    paralelo_id: int,
    db: Session = Depends(get_db),
    estudiante: Identidad = Depends(require_estudiante),
):
    """Darse de baja de un paralelo"""
    return resolver(
        servicio_academico.abandonar_curso(db, estudiante.id, paralelo_id)
    )


@router.post("/tutor", response_model=RespuestaTutor)
def chat_tutor(
    pregunta_in: PreguntaTutor,
    db: Session = Depends(get_db),
    estudiante: Identidad = Depends(require_estudiante),
):
    """Consultar al tutor académico"""
    return resolver(tutor_ia.responder(db, estudiante.id, pregunta_in.pregunta))
