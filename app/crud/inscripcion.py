from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.crud.base import CRUDBase
from app.crud.paralelo import filtro_inscritos
from app.models.estudiante import Estudiante
from app.models.gestion import Gestion
from app.models.inscripcion import EstadoInscripcion, Inscripcion
from app.models.paralelo import Paralelo


class CRUDInscripcion(CRUDBase[Inscripcion]):
    def get_cursando(self, db: Session, paralelo: Paralelo) -> List[Inscripcion]:
        """Inscripciones TAKING del paralelo ordenadas por apellido"""
        return (
            db.query(Inscripcion)
            .join(Estudiante, Inscripcion.estudiante_id == Estudiante.id)
            .options(joinedload(Inscripcion.estudiante))
            .filter(
                filtro_inscritos(paralelo),
                Inscripcion.estado == EstadoInscripcion.TAKING,
            )
            .order_by(Estudiante.apellido, Estudiante.nombre, Inscripcion.id)
            .all()
        )

    def get_por_estudiante_paralelo(
        self, db: Session, estudiante_id: int, paralelo: Paralelo
    ) -> Optional[Inscripcion]:
        return (
            db.query(Inscripcion)
            .filter(filtro_inscritos(paralelo), Inscripcion.estudiante_id == estudiante_id)
            .order_by(Inscripcion.paralelo_id.is_(None))
            .first()
        )

    def get_por_estudiante_materia(
        self, db: Session, estudiante_id: int, materia_id: int
    ) -> Optional[Inscripcion]:
        return (
            db.query(Inscripcion)
            .filter(
                Inscripcion.estudiante_id == estudiante_id,
                Inscripcion.materia_id == materia_id,
            )
            .first()
        )

    def get_by_estudiante(self, db: Session, estudiante_id: int) -> List[Inscripcion]:
        return (
            db.query(Inscripcion)
            .options(joinedload(Inscripcion.materia))
            .filter(Inscripcion.estudiante_id == estudiante_id)
            .order_by(Inscripcion.id)
            .all()
        )

    def get_activas_de_estudiante(
        self, db: Session, estudiante_id: int
    ) -> List[Inscripcion]:
        """Inscripciones TAKING/PENDING en paralelos de la gestión activa"""
        return (
            db.query(Inscripcion)
            .join(Paralelo, Inscripcion.paralelo_id == Paralelo.id)
            .join(Gestion, Paralelo.gestion_id == Gestion.id)
            .options(
                joinedload(Inscripcion.materia),
                joinedload(Inscripcion.paralelo),
            )
            .filter(
                Inscripcion.estudiante_id == estudiante_id,
                Inscripcion.estado.in_(
                    [EstadoInscripcion.TAKING, EstadoInscripcion.PENDING]
                ),
                Gestion.activa.is_(True),
            )
            .order_by(Inscripcion.id)
            .all()
        )

    def contar_en_paralelo(self, db: Session, paralelo: Paralelo) -> int:
        """Cupos ocupados; misma regla de pertenencia que la lista del paralelo"""
        return (
            db.query(func.count(Inscripcion.id))
            .filter(
                filtro_inscritos(paralelo),
                Inscripcion.estado == EstadoInscripcion.TAKING,
            )
            .scalar()
            or 0
        )

    def remove_de_paralelo(
        self, db: Session, estudiante_id: int, paralelo: Paralelo
    ) -> int:
        """
        Dar de baja al estudiante del paralelo. Si no hay inscripción ligada al
        paralelo se eliminan las antiguas registradas solo con la materia.
        """
        filas = (
            db.query(Inscripcion)
            .filter(
                Inscripcion.estudiante_id == estudiante_id,
                Inscripcion.paralelo_id == paralelo.id,
            )
            .all()
        )
        if not filas:
            filas = (
                db.query(Inscripcion)
                .filter(
                    Inscripcion.estudiante_id == estudiante_id,
                    Inscripcion.paralelo_id.is_(None),
                    Inscripcion.materia_id == paralelo.materia_id,
                )
                .all()
            )

        for fila in filas:
            db.delete(fila)
        db.commit()
        return len(filas)


inscripcion = CRUDInscripcion(Inscripcion)
