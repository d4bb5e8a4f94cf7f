from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime, time

from app.core.calificaciones import CategoriaActividad


class ActividadBase(BaseModel):
    titulo: str = Field(..., min_length=1, max_length=200)
    descripcion: str = ""
    categoria: CategoriaActividad = CategoriaActividad.INDIVIDUAL


class ActividadCreate(ActividadBase):
    fecha: date
    hora: Optional[time] = None  # 07:00 si no se indica


class ActividadInDB(ActividadBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    paralelo_id: int
    fecha_limite: datetime
    created_at: datetime
    updated_at: datetime


class Actividad(ActividadInDB):
    pass
