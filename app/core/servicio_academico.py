"""
Adaptador entre la persistencia y el motor de calificaciones.

Cada operación carga los registros necesarios, llama a las funciones puras de
``app.core.calificaciones`` y devuelve un resultado etiquetado
(``Exito``, ``ErrorValidacion``, ``NoEncontrado`` o ``ErrorPersistencia``).
"""

import functools
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.core.calificaciones import (
    PESOS_CATEGORIA,
    ActividadEvaluable,
    EntradaEstudiante,
    EstadoAsistencia,
    NotaRegistrada,
    PoliticaEvaluacion,
    calcular_estadisticas,
    ensamblar_matriz,
    evaluar_curso,
    redondear,
)
from app.core.resultados import (
    ErrorPersistencia,
    ErrorValidacion,
    Exito,
    NoEncontrado,
    Resultado,
)
from app.crud.actividad import actividad as crud_actividad
from app.crud.asistencia import asistencia as crud_asistencia
from app.crud.calificacion import calificacion as crud_calificacion
from app.crud.estudiante import estudiante as crud_estudiante
from app.crud.inscripcion import inscripcion as crud_inscripcion
from app.crud.paralelo import paralelo as crud_paralelo
from app.models.actividad import Actividad
from app.models.inscripcion import EstadoInscripcion, Inscripcion
from app.models.paralelo import Paralelo
from app.schemas import reporte
from app.schemas.actividad import ActividadCreate
from app.schemas.asistencia import (
    AsistenciaGuardada,
    AsistenciaLote,
    FilaAsistencia,
    HojaAsistencia,
)
from app.schemas.calificacion import (
    CalificacionUpsert,
    EntradaPlanilla,
    EntregaCreate,
    PlanillaActividad,
)

logger = logging.getLogger(__name__)

politica = PoliticaEvaluacion.desde_settings(settings)


def con_manejo_persistencia(operacion: str):
    """Convertir errores de SQLAlchemy en ErrorPersistencia con rollback"""

    def decorador(func):
        @functools.wraps(func)
        def envoltura(db: Session, *args, **kwargs):
            try:
                return func(db, *args, **kwargs)
            except SQLAlchemyError:
                logger.exception("❌ Error de persistencia en %s", operacion)
                db.rollback()
                return ErrorPersistencia(operacion)

        return envoltura

    return decorador


def _evaluables(actividades: List[Actividad]) -> List[ActividadEvaluable]:
    return [ActividadEvaluable(id=a.id, categoria=a.categoria) for a in actividades]


def _evaluar_inscripcion(
    db: Session, estudiante_id: int, paralelo: Paralelo, inscripcion: Optional[Inscripcion]
):
    actividades = crud_actividad.get_by_paralelo(db, paralelo.id)
    calificaciones = crud_calificacion.get_de_estudiante_en_paralelo(
        db, estudiante_id, paralelo.id
    )
    asistencias = (
        crud_asistencia.get_by_inscripcion(db, inscripcion.id) if inscripcion else []
    )
    resultado = evaluar_curso(
        _evaluables(actividades),
        [NotaRegistrada(c.actividad_id, c.nota) for c in calificaciones],
        [a.estado for a in asistencias],
        PESOS_CATEGORIA,
        politica,
    )
    return actividades, calificaciones, asistencias, resultado


def _resumen_schema(categorias) -> List[reporte.ResumenCategoria]:
    return [
        reporte.ResumenCategoria(
            categoria=c.categoria,
            etiqueta=c.etiqueta,
            peso=c.peso,
            cantidad=c.cantidad,
            promedio=float(c.promedio),
            aporte=float(redondear(c.aporte)),
        )
        for c in categorias
    ]


# =====================================================================
# DOCENTE
# =====================================================================


@con_manejo_persistencia("listar_cursos_docente")
def listar_cursos_docente(db: Session, docente_id: int) -> Resultado[List[dict]]:
    cursos = []
    for p, cantidad in crud_paralelo.get_by_docente_con_conteo(db, docente_id):
        cursos.append(
            {
                "id": p.id,
                "materia": p.materia.nombre,
                "sigla": p.materia.sigla,
                "codigo": p.codigo,
                "gestion": p.gestion.descripcion,
                "cantidad_estudiantes": cantidad,
            }
        )
    return Exito(cursos)


@con_manejo_persistencia("obtener_cabecera_curso")
def obtener_cabecera_curso(db: Session, paralelo_id: int) -> Resultado[dict]:
    paralelo = crud_paralelo.get_with_relations(db, paralelo_id)
    if paralelo is None:
        return NoEncontrado("Curso", paralelo_id)

    return Exito(
        {
            "id": paralelo.id,
            "materia": paralelo.materia.nombre,
            "codigo_paralelo": paralelo.codigo,
            "gestion": paralelo.gestion.descripcion,
            "docente": paralelo.docente.nombre_completo,
            "capacidad": paralelo.capacidad,
        }
    )


@con_manejo_persistencia("construir_matriz")
def construir_matriz(
    db: Session, paralelo_id: int
) -> Resultado[reporte.MatrizCalificaciones]:
    """Matriz de notas + asistencia de todo el paralelo"""
    paralelo = crud_paralelo.get_with_relations(db, paralelo_id)
    if paralelo is None:
        return NoEncontrado("Curso", paralelo_id)

    actividades = crud_actividad.get_by_paralelo(db, paralelo.id)
    inscripciones = crud_inscripcion.get_cursando(db, paralelo)
    asistencias = crud_asistencia.get_by_inscripciones(db, [i.id for i in inscripciones])

    notas_por_estudiante: Dict[int, List[NotaRegistrada]] = {}
    for c in crud_calificacion.get_by_paralelo(db, paralelo.id):
        notas_por_estudiante.setdefault(c.estudiante_id, []).append(
            NotaRegistrada(c.actividad_id, c.nota)
        )

    entradas = [
        EntradaEstudiante(
            estudiante_id=i.estudiante_id,
            inscripcion_id=i.id,
            nombre_completo=i.estudiante.nombre_completo,
            notas=notas_por_estudiante.get(i.estudiante_id, []),
            asistencias=[a.estado for a in asistencias.get(i.id, [])],
        )
        for i in inscripciones
    ]

    filas = ensamblar_matriz(_evaluables(actividades), entradas, PESOS_CATEGORIA, politica)
    estadisticas = calcular_estadisticas(filas)

    return Exito(
        reporte.MatrizCalificaciones(
            paralelo_id=paralelo.id,
            materia=paralelo.materia.nombre,
            codigo_paralelo=paralelo.codigo,
            pesos=dict(PESOS_CATEGORIA),
            actividades=[
                reporte.ActividadMatriz(
                    id=a.id,
                    titulo=a.titulo,
                    categoria=a.categoria,
                    fecha_limite=a.fecha_limite,
                )
                for a in actividades
            ],
            estudiantes=[
                reporte.FilaMatriz(
                    estudiante_id=f.estudiante_id,
                    inscripcion_id=f.inscripcion_id,
                    nombre_completo=f.nombre_completo,
                    notas=f.notas,
                    desglose={k: float(v) for k, v in f.desglose.items()},
                    total_final=float(f.total_final),
                    porcentaje_asistencia=float(f.porcentaje_asistencia),
                    estado=f.estado,
                )
                for f in filas
            ],
            estadisticas=reporte.EstadisticasCurso(
                total_estudiantes=estadisticas.total_estudiantes,
                aprobados=estadisticas.aprobados,
                suspensos=estadisticas.suspensos,
                reprobados=estadisticas.reprobados,
                reprobados_por_asistencia=estadisticas.reprobados_por_asistencia,
                promedio_curso=float(estadisticas.promedio_curso),
            ),
        )
    )


@con_manejo_persistencia("listar_actividades")
def listar_actividades(db: Session, paralelo_id: int) -> Resultado[List[Actividad]]:
    if crud_paralelo.get(db, paralelo_id) is None:
        return NoEncontrado("Curso", paralelo_id)
    return Exito(crud_actividad.get_by_paralelo(db, paralelo_id))


@con_manejo_persistencia("crear_actividad")
def crear_actividad(
    db: Session, paralelo_id: int, datos: ActividadCreate, hoy: Optional[date] = None
) -> Resultado[Actividad]:
    if crud_paralelo.get(db, paralelo_id) is None:
        return NoEncontrado("Curso", paralelo_id)

    hoy = hoy or date.today()
    if datos.fecha < hoy:
        return ErrorValidacion("No se pueden crear actividades en fechas pasadas")

    nueva = crud_actividad.create_para_paralelo(db, paralelo_id=paralelo_id, obj_in=datos)
    logger.info("Actividad %s creada en paralelo %s", nueva.id, paralelo_id)
    return Exito(nueva)


@con_manejo_persistencia("eliminar_actividad")
def eliminar_actividad(db: Session, actividad_id: int) -> Resultado[dict]:
    eliminada = crud_actividad.remove(db, id=actividad_id)
    if eliminada is None:
        return NoEncontrado("Actividad", actividad_id)
    logger.info("Actividad %s eliminada junto con sus calificaciones", actividad_id)
    return Exito({"id": actividad_id, "mensaje": "Actividad eliminada"})


@con_manejo_persistencia("planilla_actividad")
def planilla_actividad(db: Session, actividad_id: int) -> Resultado[PlanillaActividad]:
    """Estudiantes del paralelo con su entrega y nota para una actividad"""
    actividad = crud_actividad.get(db, actividad_id)
    if actividad is None:
        return NoEncontrado("Actividad", actividad_id)

    inscripciones = crud_inscripcion.get_cursando(db, actividad.paralelo)
    por_estudiante = {
        c.estudiante_id: c for c in crud_calificacion.get_by_actividad(db, actividad_id)
    }

    estudiantes = []
    for i in inscripciones:
        c = por_estudiante.get(i.estudiante_id)
        estudiantes.append(
            EntradaPlanilla(
                estudiante_id=i.estudiante_id,
                nombre_completo=i.estudiante.nombre_completo,
                nota=c.nota if c else None,
                enlace_entrega=c.enlace_entrega if c else None,
                retroalimentacion=(c.retroalimentacion or "") if c else "",
                entregado_en=c.entregado_en if c else None,
                tiene_nota=bool(c and c.nota is not None),
            )
        )

    return Exito(
        PlanillaActividad(
            actividad_id=actividad.id,
            titulo=actividad.titulo,
            descripcion=actividad.descripcion or "",
            categoria=actividad.categoria.value,
            fecha_limite=actividad.fecha_limite,
            estudiantes=estudiantes,
        )
    )


@con_manejo_persistencia("registrar_nota")
def registrar_nota(db: Session, actividad_id: int, datos: CalificacionUpsert):
    actividad = crud_actividad.get(db, actividad_id)
    if actividad is None:
        return NoEncontrado("Actividad", actividad_id)

    inscrito = crud_inscripcion.get_por_estudiante_paralelo(
        db, datos.estudiante_id, actividad.paralelo
    )
    if inscrito is None or inscrito.estado != EstadoInscripcion.TAKING:
        return NoEncontrado("Estudiante", datos.estudiante_id)

    registro = crud_calificacion.upsert_nota(
        db,
        estudiante_id=datos.estudiante_id,
        actividad_id=actividad_id,
        nota=datos.nota,
        retroalimentacion=datos.retroalimentacion,
    )
    return Exito(registro)


@con_manejo_persistencia("hoja_asistencia")
def hoja_asistencia(db: Session, paralelo_id: int, fecha: date) -> Resultado[HojaAsistencia]:
    paralelo = crud_paralelo.get(db, paralelo_id)
    if paralelo is None:
        return NoEncontrado("Curso", paralelo_id)

    inscripciones = crud_inscripcion.get_cursando(db, paralelo)
    registros = crud_asistencia.get_por_fecha(db, fecha, [i.id for i in inscripciones])

    filas = []
    for i in inscripciones:
        registro = registros.get(i.id)
        filas.append(
            FilaAsistencia(
                inscripcion_id=i.id,
                estudiante_id=i.estudiante_id,
                nombre_completo=i.estudiante.nombre_completo,
                estado=registro.estado if registro else EstadoAsistencia.PRESENT,
                registrado=registro is not None,
            )
        )

    return Exito(HojaAsistencia(paralelo_id=paralelo_id, fecha=fecha, estudiantes=filas))


@con_manejo_persistencia("guardar_asistencia")
def guardar_asistencia(
    db: Session, lote: AsistenciaLote, hoy: Optional[date] = None
) -> Resultado[AsistenciaGuardada]:
    hoy = hoy or date.today()
    if lote.fecha > hoy:
        return ErrorValidacion("No puedes marcar asistencia en fechas futuras")

    paralelo = crud_paralelo.get(db, lote.paralelo_id)
    if paralelo is None:
        return NoEncontrado("Curso", lote.paralelo_id)

    validas = {i.id for i in crud_inscripcion.get_cursando(db, paralelo)}
    estados = {r.inscripcion_id: r.estado for r in lote.registros}
    ajenas = sorted(set(estados) - validas)
    if ajenas:
        return ErrorValidacion(
            "Inscripciones que no pertenecen al curso: "
            + ", ".join(str(i) for i in ajenas)
        )

    guardados = crud_asistencia.guardar_lote(db, lote.fecha, estados)
    logger.info(
        "Asistencia de %s guardada para paralelo %s (%s registros)",
        lote.fecha,
        lote.paralelo_id,
        guardados,
    )
    return Exito(
        AsistenciaGuardada(
            paralelo_id=lote.paralelo_id,
            fecha=lote.fecha,
            guardados=guardados,
            mensaje="Asistencia guardada correctamente",
        )
    )


# =====================================================================
# ESTUDIANTE
# =====================================================================


@con_manejo_persistencia("cursos_estudiante")
def cursos_estudiante(
    db: Session, estudiante_id: int
) -> Resultado[List[reporte.CursoEstudiante]]:
    cursos = []
    for i in crud_inscripcion.get_activas_de_estudiante(db, estudiante_id):
        *_, resultado = _evaluar_inscripcion(db, estudiante_id, i.paralelo, i)
        cursos.append(
            reporte.CursoEstudiante(
                paralelo_id=i.paralelo_id,
                materia=i.materia.nombre,
                codigo_paralelo=i.paralelo.codigo,
                nivel=i.materia.nivel,
                estado_inscripcion=i.estado.value,
                total_final=float(resultado.total_final),
                porcentaje_asistencia=float(resultado.porcentaje_asistencia),
                estado=resultado.estado,
            )
        )
    return Exito(cursos)


@con_manejo_persistencia("detalle_curso_estudiante")
def detalle_curso_estudiante(
    db: Session, estudiante_id: int, paralelo_id: int
) -> Resultado[reporte.DetalleCursoEstudiante]:
    paralelo = crud_paralelo.get_with_relations(db, paralelo_id)
    if paralelo is None:
        return NoEncontrado("Curso", paralelo_id)

    inscripcion = crud_inscripcion.get_por_estudiante_paralelo(db, estudiante_id, paralelo)
    if inscripcion is None:
        return NoEncontrado("Inscripción", paralelo_id)

    actividades, calificaciones, asistencias, resultado = _evaluar_inscripcion(
        db, estudiante_id, paralelo, inscripcion
    )
    por_actividad = {c.actividad_id: c for c in calificaciones}

    lista = []
    # Las más recientes primero
    for a in sorted(actividades, key=lambda a: a.fecha_limite, reverse=True):
        c = por_actividad.get(a.id)
        lista.append(
            reporte.ActividadEstudiante(
                id=a.id,
                nombre=a.titulo,
                categoria=a.categoria,
                descripcion=a.descripcion or "",
                fecha_limite=a.fecha_limite,
                mi_nota=c.nota if c else None,
                enlace_entrega=c.enlace_entrega if c else None,
                retroalimentacion=c.retroalimentacion if c else None,
                entregado_en=c.entregado_en if c else None,
            )
        )

    return Exito(
        reporte.DetalleCursoEstudiante(
            paralelo_id=paralelo.id,
            materia=paralelo.materia.nombre,
            codigo_paralelo=paralelo.codigo,
            actividades=lista,
            resumen_notas=_resumen_schema(resultado.categorias),
            total_final=float(resultado.total_final),
            porcentaje_asistencia=float(resultado.porcentaje_asistencia),
            estado=resultado.estado,
            asistencias=[
                reporte.RegistroAsistenciaHistorial(fecha=a.fecha, estado=a.estado.value)
                for a in asistencias
            ],
        )
    )


@con_manejo_persistencia("registrar_entrega")
def registrar_entrega(db: Session, estudiante_id: int, datos: EntregaCreate):
    actividad = crud_actividad.get(db, datos.actividad_id)
    if actividad is None:
        return NoEncontrado("Actividad", datos.actividad_id)

    if crud_inscripcion.get_por_estudiante_paralelo(db, estudiante_id, actividad.paralelo) is None:
        return NoEncontrado("Inscripción", actividad.paralelo_id)

    registro = crud_calificacion.upsert_entrega(
        db,
        estudiante_id=estudiante_id,
        actividad_id=datos.actividad_id,
        enlace=datos.enlace.strip(),
    )
    return Exito(registro)


@con_manejo_persistencia("resumen_academico")
def resumen_academico(
    db: Session, estudiante_id: int
) -> Resultado[reporte.ResumenAcademico]:
    """Promedio sobre materias aprobadas y avance actual"""
    estudiante = crud_estudiante.get(db, estudiante_id)
    if estudiante is None:
        return NoEncontrado("Estudiante", estudiante_id)

    inscripciones = crud_inscripcion.get_by_estudiante(db, estudiante_id)
    aprobadas = [i for i in inscripciones if i.estado == EstadoInscripcion.APPROVED]
    cursando = [i for i in inscripciones if i.estado == EstadoInscripcion.TAKING]
    en_curso = [
        i
        for i in inscripciones
        if i.estado in (EstadoInscripcion.TAKING, EstadoInscripcion.PENDING)
    ]

    notas = [i.nota_final for i in aprobadas if i.nota_final is not None]
    promedio = 0.0
    if notas:
        suma = sum((Decimal(str(n)) for n in notas), Decimal("0"))
        promedio = float(redondear(suma / len(notas)))

    return Exito(
        reporte.ResumenAcademico(
            estudiante_id=estudiante.id,
            nombre_completo=estudiante.nombre_completo,
            promedio=promedio,
            aprobadas=len(aprobadas),
            cursando=len(cursando),
            nivel_actual=max((i.materia.nivel for i in en_curso), default=1),
        )
    )


@con_manejo_persistencia("inscribir")
def inscribir(db: Session, estudiante_id: int, paralelo_id: int) -> Resultado[dict]:
    """Inscribir al estudiante; reutiliza la fila de un intento reprobado"""
    if crud_estudiante.get(db, estudiante_id) is None:
        return NoEncontrado("Estudiante", estudiante_id)

    paralelo = crud_paralelo.get_with_relations(db, paralelo_id)
    if paralelo is None:
        return NoEncontrado("Curso", paralelo_id)

    previa = crud_inscripcion.get_por_estudiante_materia(db, estudiante_id, paralelo.materia_id)
    if previa is not None and previa.estado == EstadoInscripcion.APPROVED:
        return ErrorValidacion(
            f"Ya aprobaste {paralelo.materia.nombre} (nota: {previa.nota_final})"
        )
    if previa is not None and previa.estado == EstadoInscripcion.TAKING:
        return ErrorValidacion("Ya estás cursando esta materia")

    if crud_inscripcion.contar_en_paralelo(db, paralelo) >= paralelo.capacidad:
        return ErrorValidacion("El paralelo está lleno")

    if previa is None:
        previa = Inscripcion(estudiante_id=estudiante_id, materia_id=paralelo.materia_id)
        db.add(previa)
    elif previa.asistencias:
        # La asistencia del intento anterior no cuenta en el nuevo paralelo
        logger.info(
            "Descartando %s registros de asistencia de la inscripción %s",
            len(previa.asistencias),
            previa.id,
        )
        previa.asistencias.clear()

    previa.paralelo_id = paralelo.id
    previa.estado = EstadoInscripcion.TAKING
    previa.nota_final = None
    db.commit()
    db.refresh(previa)

    logger.info("Estudiante %s inscrito en paralelo %s", estudiante_id, paralelo.id)
    return Exito(
        {
            "inscripcion_id": previa.id,
            "paralelo_id": paralelo.id,
            "materia": paralelo.materia.nombre,
            "estado": previa.estado.value,
        }
    )


@con_manejo_persistencia("abandonar_curso")
def abandonar_curso(db: Session, estudiante_id: int, paralelo_id: int) -> Resultado[dict]:
    paralelo = crud_paralelo.get(db, paralelo_id)
    if paralelo is None:
        return NoEncontrado("Inscripción", paralelo_id)

    eliminadas = crud_inscripcion.remove_de_paralelo(db, estudiante_id, paralelo)
    if not eliminadas:
        return NoEncontrado("Inscripción", paralelo_id)

    logger.info("Estudiante %s dado de baja del paralelo %s", estudiante_id, paralelo_id)
    return Exito(
        {
            "paralelo_id": paralelo_id,
            "eliminadas": eliminadas,
            "mensaje": "Te diste de baja del curso",
        }
    )
