from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from .base import BaseModel


class Calificacion(BaseModel):
    __tablename__ = "calificaciones"
    __table_args__ = (
        UniqueConstraint(
            "estudiante_id", "actividad_id", name="uq_calificacion_estudiante_actividad"
        ),
    )

    estudiante_id = Column(Integer, ForeignKey("estudiantes.id"), nullable=False)
    actividad_id = Column(
        Integer, ForeignKey("actividades.id", ondelete="CASCADE"), nullable=False
    )
    # Nula hasta que el docente califica
    nota = Column(Float, nullable=True)
    enlace_entrega = Column(String(500), nullable=True)
    retroalimentacion = Column(Text, nullable=True)
    entregado_en = Column(DateTime, nullable=True)

    # Relationships
    estudiante = relationship("Estudiante", back_populates="calificaciones")
    actividad = relationship("Actividad", back_populates="calificaciones")
