from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.actividad import Actividad
from app.models.calificacion import Calificacion


class CRUDCalificacion(CRUDBase[Calificacion]):
    def get_por_estudiante_actividad(
        self, db: Session, estudiante_id: int, actividad_id: int
    ) -> Optional[Calificacion]:
        return (
            db.query(Calificacion)
            .filter(
                Calificacion.estudiante_id == estudiante_id,
                Calificacion.actividad_id == actividad_id,
            )
            .first()
        )

    def get_by_actividad(self, db: Session, actividad_id: int) -> List[Calificacion]:
        return (
            db.query(Calificacion)
            .filter(Calificacion.actividad_id == actividad_id)
            .all()
        )

    def get_by_paralelo(self, db: Session, paralelo_id: int) -> List[Calificacion]:
        return (
            db.query(Calificacion)
            .join(Actividad, Calificacion.actividad_id == Actividad.id)
            .filter(Actividad.paralelo_id == paralelo_id)
            .all()
        )

    def get_de_estudiante_en_paralelo(
        self, db: Session, estudiante_id: int, paralelo_id: int
    ) -> List[Calificacion]:
        return (
            db.query(Calificacion)
            .join(Actividad, Calificacion.actividad_id == Actividad.id)
            .filter(
                Calificacion.estudiante_id == estudiante_id,
                Actividad.paralelo_id == paralelo_id,
            )
            .all()
        )

    def upsert_nota(
        self,
        db: Session,
        *,
        estudiante_id: int,
        actividad_id: int,
        nota: Optional[float],
        retroalimentacion: Optional[str] = None,
    ) -> Calificacion:
        return self._upsert(
            db,
            estudiante_id,
            actividad_id,
            {"nota": nota, "retroalimentacion": retroalimentacion or ""},
        )

    def upsert_entrega(
        self, db: Session, *, estudiante_id: int, actividad_id: int, enlace: str
    ) -> Calificacion:
        """Registrar el enlace de entrega sin tocar la nota"""
        return self._upsert(
            db,
            estudiante_id,
            actividad_id,
            {"enlace_entrega": enlace, "entregado_en": datetime.now(timezone.utc)},
        )

    def _upsert(
        self,
        db: Session,
        estudiante_id: int,
        actividad_id: int,
        cambios: Dict[str, Any],
    ) -> Calificacion:
        # Un segundo intento cubre el alta concurrente del mismo par
        for intento in range(2):
            registro = self.get_por_estudiante_actividad(db, estudiante_id, actividad_id)
            if registro is None:
                registro = Calificacion(
                    estudiante_id=estudiante_id, actividad_id=actividad_id
                )
                db.add(registro)

            for campo, valor in cambios.items():
                setattr(registro, campo, valor)

            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                if intento:
                    raise
                continue

            db.refresh(registro)
            return registro


calificacion = CRUDCalificacion(Calificacion)
