from typing import Optional

from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.estudiante import Estudiante


class CRUDEstudiante(CRUDBase[Estudiante]):
    def get_by_registro(self, db: Session, registro: str) -> Optional[Estudiante]:
        return db.query(Estudiante).filter(Estudiante.registro == registro).first()


estudiante = CRUDEstudiante(Estudiante)
