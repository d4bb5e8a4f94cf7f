from sqlalchemy import Column, Date, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.calificaciones import EstadoAsistencia
from .base import BaseModel


class Asistencia(BaseModel):
    __tablename__ = "asistencias"
    __table_args__ = (
        UniqueConstraint("fecha", "inscripcion_id", name="uq_asistencia_fecha_inscripcion"),
    )

    fecha = Column(Date, nullable=False, index=True)
    estado = Column(Enum(EstadoAsistencia, name="estado_asistencia"), nullable=False)
    inscripcion_id = Column(
        Integer, ForeignKey("inscripciones.id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    inscripcion = relationship("Inscripcion", back_populates="asistencias")
