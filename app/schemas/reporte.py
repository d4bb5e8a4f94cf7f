from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import date, datetime

from app.core.calificaciones import CategoriaActividad, EstadoAcademico


class ResumenCategoria(BaseModel):
    categoria: CategoriaActividad
    etiqueta: str
    peso: int
    cantidad: int
    promedio: float
    aporte: float


class ActividadEstudiante(BaseModel):
    id: int
    nombre: str
    categoria: CategoriaActividad
    descripcion: str = ""
    fecha_limite: datetime
    mi_nota: Optional[float] = None
    enlace_entrega: Optional[str] = None
    retroalimentacion: Optional[str] = None
    entregado_en: Optional[datetime] = None


class RegistroAsistenciaHistorial(BaseModel):
    fecha: date
    estado: str


class DetalleCursoEstudiante(BaseModel):
    paralelo_id: int
    materia: str
    codigo_paralelo: str
    actividades: List[ActividadEstudiante] = []
    resumen_notas: List[ResumenCategoria] = []
    total_final: float
    porcentaje_asistencia: float
    estado: EstadoAcademico
    asistencias: List[RegistroAsistenciaHistorial] = []


class CursoEstudiante(BaseModel):
    paralelo_id: Optional[int] = None
    materia: str
    codigo_paralelo: Optional[str] = None
    nivel: int
    estado_inscripcion: str
    total_final: float
    porcentaje_asistencia: float
    estado: EstadoAcademico


class ActividadMatriz(BaseModel):
    id: int
    titulo: str
    categoria: CategoriaActividad
    fecha_limite: datetime


class FilaMatriz(BaseModel):
    estudiante_id: int
    inscripcion_id: int
    nombre_completo: str
    notas: Dict[int, Optional[float]]
    desglose: Dict[CategoriaActividad, float]
    total_final: float
    porcentaje_asistencia: float
    estado: EstadoAcademico


class EstadisticasCurso(BaseModel):
    total_estudiantes: int
    aprobados: int
    suspensos: int
    reprobados: int
    reprobados_por_asistencia: int
    promedio_curso: float


class MatrizCalificaciones(BaseModel):
    paralelo_id: int
    materia: str
    codigo_paralelo: str
    pesos: Dict[CategoriaActividad, int]
    actividades: List[ActividadMatriz] = []
    estudiantes: List[FilaMatriz] = []
    estadisticas: EstadisticasCurso


class ResumenAcademico(BaseModel):
    estudiante_id: int
    nombre_completo: str
    promedio: float
    aprobadas: int
    cursando: int
    nivel_actual: int
