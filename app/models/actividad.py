from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.calificaciones import CategoriaActividad
from .base import BaseModel


class Actividad(BaseModel):
    __tablename__ = "actividades"

    titulo = Column(String(200), nullable=False)
    descripcion = Column(Text, nullable=False, default="")
    categoria = Column(
        Enum(CategoriaActividad, name="categoria_actividad"),
        nullable=False,
        default=CategoriaActividad.INDIVIDUAL,
    )
    fecha_limite = Column(DateTime, nullable=False)
    paralelo_id = Column(
        Integer, ForeignKey("paralelos.id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    paralelo = relationship("Paralelo", back_populates="actividades")
    calificaciones = relationship(
        "Calificacion",
        back_populates="actividad",
        cascade="all, delete-orphan",
    )
