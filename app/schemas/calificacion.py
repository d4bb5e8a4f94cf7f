from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, List, Optional
from datetime import datetime


class CalificacionUpsert(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    estudiante_id: int
    # null devuelve la actividad a "sin calificar"
    nota: Optional[Annotated[float, Field(ge=0, le=20)]] = Field(...)
    retroalimentacion: Optional[str] = None


class EntregaCreate(BaseModel):
    actividad_id: int
    enlace: str = Field(..., min_length=1, max_length=500)


class CalificacionInDB(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    estudiante_id: int
    actividad_id: int
    nota: Optional[float] = None
    enlace_entrega: Optional[str] = None
    retroalimentacion: Optional[str] = None
    entregado_en: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class Calificacion(CalificacionInDB):
    pass


class EntradaPlanilla(BaseModel):
    """Fila de la planilla de una actividad"""

    estudiante_id: int
    nombre_completo: str
    nota: Optional[float] = None
    enlace_entrega: Optional[str] = None
    retroalimentacion: str = ""
    entregado_en: Optional[datetime] = None
    tiene_nota: bool = False


class PlanillaActividad(BaseModel):
    actividad_id: int
    titulo: str
    descripcion: str
    categoria: str
    fecha_limite: datetime
    estudiantes: List[EntradaPlanilla] = []
