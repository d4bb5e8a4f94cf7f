from typing import List, Optional, Tuple

from sqlalchemy import func, or_, and_
from sqlalchemy.orm import Session, joinedload

from app.crud.base import CRUDBase
from app.models.inscripcion import EstadoInscripcion, Inscripcion
from app.models.paralelo import Paralelo


def filtro_inscritos(paralelo: Paralelo):
    """Inscripciones del paralelo, incluidas las antiguas ligadas solo a la materia"""
    return or_(
        Inscripcion.paralelo_id == paralelo.id,
        and_(
            Inscripcion.paralelo_id.is_(None),
            Inscripcion.materia_id == paralelo.materia_id,
        ),
    )


class CRUDParalelo(CRUDBase[Paralelo]):
    def get_with_relations(self, db: Session, id: int) -> Optional[Paralelo]:
        return (
            db.query(Paralelo)
            .options(
                joinedload(Paralelo.materia),
                joinedload(Paralelo.gestion),
                joinedload(Paralelo.docente),
            )
            .filter(Paralelo.id == id)
            .first()
        )

    def get_by_docente_con_conteo(
        self, db: Session, docente_id: int
    ) -> List[Tuple[Paralelo, int]]:
        paralelos = (
            db.query(Paralelo)
            .options(joinedload(Paralelo.materia), joinedload(Paralelo.gestion))
            .filter(Paralelo.docente_id == docente_id)
            .order_by(Paralelo.id)
            .all()
        )

        resultado = []
        for p in paralelos:
            cantidad = (
                db.query(func.count(Inscripcion.id))
                .filter(filtro_inscritos(p), Inscripcion.estado == EstadoInscripcion.TAKING)
                .scalar()
            )
            resultado.append((p, cantidad or 0))
        return resultado


paralelo = CRUDParalelo(Paralelo)
