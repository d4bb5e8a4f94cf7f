import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session

from app.config.database import SessionLocal
from app.core.calificaciones import CategoriaActividad, EstadoAsistencia
from app.crud.estudiante import estudiante as crud_estudiante
from app.models.actividad import Actividad
from app.models.asistencia import Asistencia
from app.models.calificacion import Calificacion
from app.models.docente import Docente
from app.models.estudiante import Estudiante
from app.models.gestion import Gestion
from app.models.inscripcion import EstadoInscripcion, Inscripcion
from app.models.materia import Materia
from app.models.paralelo import Paralelo

logger = logging.getLogger(__name__)


def seed_database():
    """Poblar la base de datos con datos de demostración"""

    with SessionLocal() as db:
        try:
            logger.info("🌱 Iniciando seeding de la base de datos...")

            # 1. Materias
            materias_data = [
                ("MAT101", "Cálculo I", 1),
                ("INF110", "Introducción a la Informática", 1),
                ("INF120", "Programación I", 2),
                ("MAT103", "Álgebra Lineal", 2),
                ("INF210", "Programación II", 3),
                ("INF312", "Base de Datos I", 4),
            ]
            materias = {}
            for sigla, nombre, nivel in materias_data:
                materia = Materia(sigla=sigla, nombre=nombre, nivel=nivel)
                db.add(materia)
                materias[sigla] = materia

            # 2. Docentes
            docentes_data = [
                ("María", "Gutiérrez"),
                ("Juan", "Ramírez"),
                ("Ana", "Paredes"),
            ]
            docentes = []
            for i, (nombre, apellido) in enumerate(docentes_data):
                docente = Docente(
                    codigo_docente=f"DOC-{i+1:03d}",
                    nombre=nombre,
                    apellido=apellido,
                    email=f"{nombre.lower()}.{i+1}@ingenia.edu",
                )
                db.add(docente)
                docentes.append(docente)

            # 3. Estudiantes
            estudiantes_data = [
                ("Victor", "Salvatierra", "VIC001"),
                ("Tatiana", "Cuéllar", "TAT002"),
                ("Gabriel", "Fernández", "GAB003"),
                ("Lucía", "Soto", "LUC004"),
                ("Álvaro", "Pérez", "ALV005"),
                ("Sofía", "Ribas", "SOF006"),
            ]
            estudiantes = []
            for nombre, apellido, registro in estudiantes_data:
                estudiante = Estudiante(nombre=nombre, apellido=apellido, registro=registro)
                db.add(estudiante)
                estudiantes.append(estudiante)

            # 4. Gestiones: la anterior cerrada, la actual activa
            anterior = Gestion(codigo_gestion="GEST-2025-1", semestre=1, año=2025, activa=False)
            actual = Gestion(codigo_gestion="GEST-2025-2", semestre=2, año=2025, activa=True)
            db.add_all([anterior, actual])
            db.commit()

            # 5. Paralelos de la gestión activa
            paralelos_data = [
                ("INF120", "SA", docentes[0]),
                ("MAT103", "SB", docentes[1]),
                ("INF312", "SA", docentes[2]),
            ]
            paralelos = {}
            for sigla, codigo, docente in paralelos_data:
                paralelo = Paralelo(
                    codigo=codigo,
                    capacidad=30,
                    docente_id=docente.id,
                    gestion_id=actual.id,
                    materia_id=materias[sigla].id,
                )
                db.add(paralelo)
                paralelos[sigla] = paralelo
            db.commit()

            # 6. Inscripciones: historial aprobado + cursando en la gestión activa
            for i, estudiante in enumerate(estudiantes):
                db.add(
                    Inscripcion(
                        estudiante_id=estudiante.id,
                        materia_id=materias["MAT101"].id,
                        estado=EstadoInscripcion.APPROVED,
                        nota_final=14 + i % 5,
                    )
                )
                for sigla in ("INF120", "MAT103"):
                    db.add(
                        Inscripcion(
                            estudiante_id=estudiante.id,
                            materia_id=materias[sigla].id,
                            paralelo_id=paralelos[sigla].id,
                            estado=EstadoInscripcion.TAKING,
                        )
                    )
            db.commit()

            # 7. Actividades de Programación I
            hoy = date.today()
            actividades_data = [
                ("Práctico 1: variables", CategoriaActividad.INDIVIDUAL, -21),
                ("Práctico 2: estructuras de control", CategoriaActividad.INDIVIDUAL, -14),
                ("Proyecto grupal: agenda", CategoriaActividad.GRUPAL, -7),
                ("Examen de medio semestre", CategoriaActividad.MEDIO, -3),
                ("Examen final", CategoriaActividad.FINAL, 30),
            ]
            actividades = []
            for titulo, categoria, dias in actividades_data:
                actividad = Actividad(
                    titulo=titulo,
                    descripcion="",
                    categoria=categoria,
                    fecha_limite=datetime.combine(hoy + timedelta(days=dias), time(7, 0)),
                    paralelo_id=paralelos["INF120"].id,
                )
                db.add(actividad)
                actividades.append(actividad)
            db.commit()

            # 8. Notas de las actividades ya vencidas
            for i, estudiante in enumerate(estudiantes):
                for j, actividad in enumerate(actividades[:4]):
                    db.add(
                        Calificacion(
                            estudiante_id=estudiante.id,
                            actividad_id=actividad.id,
                            nota=float(8 + (i * 3 + j * 2) % 13),
                            retroalimentacion="",
                        )
                    )

            # 9. Asistencia de las últimas tres semanas
            cursando = (
                db.query(Inscripcion)
                .filter(Inscripcion.paralelo_id == paralelos["INF120"].id)
                .order_by(Inscripcion.id)
                .all()
            )
            estados = list(EstadoAsistencia)
            for semana in range(3):
                fecha = hoy - timedelta(days=7 * (semana + 1))
                for i, inscripcion in enumerate(cursando):
                    # El último estudiante falta seguido para ilustrar la regla de asistencia
                    if i == len(cursando) - 1:
                        estado = EstadoAsistencia.ABSENT
                    else:
                        estado = estados[(i + semana) % len(estados)]
                    db.add(Asistencia(fecha=fecha, estado=estado, inscripcion_id=inscripcion.id))
            db.commit()

            logger.info("✅ Seeding completado")
            logger.info("📖 Materias creadas: %s", len(materias))
            logger.info("👨‍🏫 Docentes creados: %s", len(docentes))
            logger.info("👨‍🎓 Estudiantes creados: %s", len(estudiantes))
            logger.info("👥 Paralelos creados: %s", len(paralelos))

        except Exception:
            logger.exception("❌ Error durante seeding")
            db.rollback()
            raise


def check_if_seeded(db: Session) -> bool:
    """Verificar si la base de datos ya tiene datos"""
    return crud_estudiante.get_by_registro(db, "VIC001") is not None or (
        db.query(Materia).first() is not None
    )


def run_seeder():
    """Ejecutar seeder solo si no hay datos"""
    with SessionLocal() as db:
        if check_if_seeded(db):
            logger.info("📊 Base de datos ya tiene datos, saltando seeding...")
            return False

    seed_database()
    return True
