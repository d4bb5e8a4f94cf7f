from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from .base import BaseModel


class Docente(BaseModel):
    __tablename__ = "docentes"

    codigo_docente = Column(String(20), unique=True, nullable=False, index=True)
    nombre = Column(String(100), nullable=False)
    apellido = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=True)

    # Relationships
    paralelos = relationship("Paralelo", back_populates="docente")

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}"
