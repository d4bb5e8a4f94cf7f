import enum

from sqlalchemy import Column, Enum, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import BaseModel


class EstadoInscripcion(str, enum.Enum):
    PENDING = "PENDING"
    TAKING = "TAKING"
    APPROVED = "APPROVED"
    FAILED = "FAILED"


class Inscripcion(BaseModel):
    __tablename__ = "inscripciones"
    __table_args__ = (
        UniqueConstraint("estudiante_id", "materia_id", name="uq_inscripcion_estudiante_materia"),
    )

    estudiante_id = Column(Integer, ForeignKey("estudiantes.id"), nullable=False)
    materia_id = Column(Integer, ForeignKey("materias.id"), nullable=False)
    # Nulo en inscripciones históricas sin paralelo asignado
    paralelo_id = Column(Integer, ForeignKey("paralelos.id"), nullable=True)
    estado = Column(
        Enum(EstadoInscripcion, name="estado_inscripcion"),
        nullable=False,
        default=EstadoInscripcion.PENDING,
    )
    nota_final = Column(Float, nullable=True)

    # Relationships
    estudiante = relationship("Estudiante", back_populates="inscripciones")
    materia = relationship("Materia", back_populates="inscripciones")
    paralelo = relationship("Paralelo", back_populates="inscripciones")
    asistencias = relationship(
        "Asistencia",
        back_populates="inscripcion",
        cascade="all, delete-orphan",
        order_by="Asistencia.fecha",
    )
