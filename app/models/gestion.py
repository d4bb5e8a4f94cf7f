from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship
from .base import BaseModel


class Gestion(BaseModel):
    __tablename__ = "gestiones"

    codigo_gestion = Column(String(20), unique=True, nullable=False, index=True)
    semestre = Column(Integer, nullable=False)
    año = Column(Integer, nullable=False)
    activa = Column(Boolean, default=False, nullable=False)

    # Relationships
    paralelos = relationship("Paralelo", back_populates="gestion")

    @property
    def descripcion(self) -> str:
        return f"SEM {self.semestre}/{self.año}"
