from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import require_docente
from app.config.database import get_db
from app.core import servicio_academico
from app.core.resultados import resolver
from app.core.security import Identidad
from app.schemas.actividad import Actividad, ActividadCreate
from app.schemas.asistencia import AsistenciaGuardada, AsistenciaLote, HojaAsistencia
from app.schemas.calificacion import Calificacion, CalificacionUpsert, PlanillaActividad
from app.schemas.reporte import EstadisticasCurso, MatrizCalificaciones

router = APIRouter()


@router.get("/cursos")
def get_mis_cursos(
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    """Paralelos que dicta el docente con su cantidad de estudiantes"""
    return resolver(servicio_academico.listar_cursos_docente(db, docente.id))


@router.get("/cursos/{paralelo_id}")
def get_curso(
    paralelo_id: int,
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    return resolver(servicio_academico.obtener_cabecera_curso(db, paralelo_id))


@router.get("/cursos/{paralelo_id}/matriz", response_model=MatrizCalificaciones)
def get_matriz(
    paralelo_id: int,
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    """Matriz de calificaciones del paralelo"""
    return resolver(servicio_academico.construir_matriz(db, paralelo_id))


@router.get("/cursos/{paralelo_id}/estadisticas", response_model=EstadisticasCurso)
def get_estadisticas(
    paralelo_id: int,
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    matriz = resolver(servicio_academico.construir_matriz(db, paralelo_id))
    return matriz.estadisticas


@router.get("/cursos/{paralelo_id}/actividades", response_model=List[Actividad])
def get_actividades(
    paralelo_id: int,
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    return resolver(servicio_academico.listar_actividades(db, paralelo_id))


@router.post(
    "/cursos/{paralelo_id}/actividades", response_model=Actividad, status_code=201
)
def create_actividad(
    paralelo_id: int,
    actividad_in: ActividadCreate,
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    """Crear actividad (hora por defecto 07:00)"""
    return resolver(servicio_academico.crear_actividad(db, paralelo_id, actividad_in))


@router.get("/actividades/{actividad_id}", response_model=PlanillaActividad)
def get_planilla_actividad(
    actividad_id: int,
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    return resolver(servicio_academico.planilla_actividad(db, actividad_id))


@router.delete("/actividades/{actividad_id}")
def delete_actividad(
    actividad_id: int,
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    """Eliminar actividad junto con sus calificaciones"""
    return resolver(servicio_academico.eliminar_actividad(db, actividad_id))


@router.post("/actividades/{actividad_id}/calificaciones", response_model=Calificacion)
def upsert_calificacion(
    actividad_id: int,
    calificacion_in: CalificacionUpsert,
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    """Registrar o actualizar la nota de un estudiante"""
    return resolver(
        servicio_academico.registrar_nota(db, actividad_id, calificacion_in)
    )


@router.get("/asistencia", response_model=HojaAsistencia)
def get_hoja_asistencia(
    paralelo_id: int = Query(..., description="ID del paralelo"),
    fecha: date = Query(..., description="Fecha de la sesión (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    return resolver(servicio_academico.hoja_asistencia(db, paralelo_id, fecha))


@router.post("/asistencia", response_model=AsistenciaGuardada)
def save_asistencia(
    lote: AsistenciaLote,
    db: Session = Depends(get_db),
    docente: Identidad = Depends(require_docente),
):
    """Guardar la hoja de asistencia del día en una sola transacción"""
    return resolver(servicio_academico.guardar_asistencia(db, lote))
