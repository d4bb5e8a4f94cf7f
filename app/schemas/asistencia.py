from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date

from app.core.calificaciones import EstadoAsistencia


class RegistroAsistencia(BaseModel):
    inscripcion_id: int
    estado: EstadoAsistencia


class AsistenciaLote(BaseModel):
    paralelo_id: int
    fecha: date
    registros: List[RegistroAsistencia] = Field(..., min_length=1)


class FilaAsistencia(BaseModel):
    inscripcion_id: int
    estudiante_id: int
    nombre_completo: str
    estado: EstadoAsistencia
    registrado: bool = False


class HojaAsistencia(BaseModel):
    paralelo_id: int
    fecha: date
    estudiantes: List[FilaAsistencia] = []


class AsistenciaGuardada(BaseModel):
    paralelo_id: int
    fecha: date
    guardados: int
    mensaje: Optional[str] = None
