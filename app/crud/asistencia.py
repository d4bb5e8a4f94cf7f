from datetime import date
from typing import Dict, Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.asistencia import Asistencia
from app.core.calificaciones import EstadoAsistencia


class CRUDAsistencia(CRUDBase[Asistencia]):
    def get_por_fecha(
        self, db: Session, fecha: date, inscripcion_ids: Iterable[int]
    ) -> Dict[int, Asistencia]:
        ids = list(inscripcion_ids)
        if not ids:
            return {}
        registros = (
            db.query(Asistencia)
            .filter(Asistencia.fecha == fecha, Asistencia.inscripcion_id.in_(ids))
            .all()
        )
        return {r.inscripcion_id: r for r in registros}

    def get_by_inscripcion(self, db: Session, inscripcion_id: int) -> List[Asistencia]:
        return (
            db.query(Asistencia)
            .filter(Asistencia.inscripcion_id == inscripcion_id)
            .order_by(Asistencia.fecha.desc())
            .all()
        )

    def get_by_inscripciones(
        self, db: Session, inscripcion_ids: Iterable[int]
    ) -> Dict[int, List[Asistencia]]:
        ids = list(inscripcion_ids)
        agrupadas: Dict[int, List[Asistencia]] = {i: [] for i in ids}
        if not ids:
            return agrupadas
        registros = (
            db.query(Asistencia)
            .filter(Asistencia.inscripcion_id.in_(ids))
            .order_by(Asistencia.fecha)
            .all()
        )
        for r in registros:
            agrupadas[r.inscripcion_id].append(r)
        return agrupadas

    def guardar_lote(
        self, db: Session, fecha: date, estados: Dict[int, EstadoAsistencia]
    ) -> int:
        """
        Upsert de toda la hoja de un día en una sola transacción.
        Si algo falla se revierte el lote completo.
        """
        existentes = self.get_por_fecha(db, fecha, estados.keys())
        try:
            for inscripcion_id, estado in estados.items():
                registro = existentes.get(inscripcion_id)
                if registro is None:
                    db.add(
                        Asistencia(
                            fecha=fecha, inscripcion_id=inscripcion_id, estado=estado
                        )
                    )
                else:
                    registro.estado = estado
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return len(estados)


asistencia = CRUDAsistencia(Asistencia)
