from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from .base import BaseModel


class Estudiante(BaseModel):
    __tablename__ = "estudiantes"

    registro = Column(String(20), unique=True, nullable=False, index=True)
    nombre = Column(String(100), nullable=False)
    apellido = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=True)

    # Relationships
    inscripciones = relationship("Inscripcion", back_populates="estudiante")
    calificaciones = relationship("Calificacion", back_populates="estudiante")

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}"
