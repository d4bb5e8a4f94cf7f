from sqlalchemy import Column, String, Integer
from sqlalchemy.orm import relationship
from .base import BaseModel


class Materia(BaseModel):
    __tablename__ = "materias"

    sigla = Column(String(20), unique=True, nullable=False, index=True)
    nombre = Column(String(200), nullable=False)
    nivel = Column(Integer, nullable=False, default=1)

    # Relationships
    paralelos = relationship("Paralelo", back_populates="materia")
    inscripciones = relationship("Inscripcion", back_populates="materia")
