from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from .base import BaseModel


class Paralelo(BaseModel):
    __tablename__ = "paralelos"

    codigo = Column(String(20), nullable=False)
    capacidad = Column(Integer, nullable=False, default=40)
    docente_id = Column(Integer, ForeignKey("docentes.id"), nullable=False)
    gestion_id = Column(Integer, ForeignKey("gestiones.id"), nullable=False)
    materia_id = Column(Integer, ForeignKey("materias.id"), nullable=False)

    # Relationships
    docente = relationship("Docente", back_populates="paralelos")
    gestion = relationship("Gestion", back_populates="paralelos")
    materia = relationship("Materia", back_populates="paralelos")
    inscripciones = relationship("Inscripcion", back_populates="paralelo")
    actividades = relationship(
        "Actividad",
        back_populates="paralelo",
        cascade="all, delete-orphan",
        order_by="Actividad.id",
    )
