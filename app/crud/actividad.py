from datetime import datetime, time
from typing import List

from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.actividad import Actividad
from app.schemas.actividad import ActividadCreate

HORA_POR_DEFECTO = time(7, 0)


class CRUDActividad(CRUDBase[Actividad]):
    def get_by_paralelo(self, db: Session, paralelo_id: int) -> List[Actividad]:
        return (
            db.query(Actividad)
            .filter(Actividad.paralelo_id == paralelo_id)
            .order_by(Actividad.id)
            .all()
        )

    def create_para_paralelo(
        self, db: Session, *, paralelo_id: int, obj_in: ActividadCreate
    ) -> Actividad:
        fecha_limite = datetime.combine(obj_in.fecha, obj_in.hora or HORA_POR_DEFECTO)
        db_obj = Actividad(
            titulo=obj_in.titulo,
            descripcion=obj_in.descripcion or "",
            categoria=obj_in.categoria,
            fecha_limite=fecha_limite,
            paralelo_id=paralelo_id,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


actividad = CRUDActividad(Actividad)
