"""
Tutor académico por reglas.

Responde en español a partir de los datos del propio estudiante: promedio,
materias en curso y situación actual de cada curso. Si algo falla al armar la
respuesta se devuelve un mensaje de respaldo marcado como ``degradado``.
"""

import logging
import unicodedata
from datetime import datetime, timezone
from typing import Callable, Iterable, List

from sqlalchemy.orm import Session

from app.core import servicio_academico
from app.core.calificaciones import EstadoAcademico
from app.core.resultados import Exito, NoEncontrado, Resultado
from app.schemas.reporte import CursoEstudiante, ResumenAcademico
from app.schemas.tutor import RespuestaTutor

logger = logging.getLogger(__name__)

MENSAJE_RESPALDO = (
    "En este momento no puedo revisar tu información académica 🛠️. "
    "Intenta de nuevo en unos minutos."
)
MENSAJE_POR_DEFECTO = (
    "Aún estoy aprendiendo 🧠. Intenta preguntarme: '¿Cuál es mi promedio?', "
    "'¿Qué materias estoy cursando?' o '¿Cómo voy en mis cursos?'."
)

ETIQUETAS_ESTADO = {
    EstadoAcademico.APPROVED: "aprobando",
    EstadoAcademico.SUSPENDED: "en suspenso",
    EstadoAcademico.FAILED: "reprobando",
    EstadoAcademico.FAILED_BY_ATTENDANCE: "reprobando por asistencia",
}


def normalizar(texto: str) -> str:
    """Minúsculas y sin tildes"""
    descompuesto = unicodedata.normalize("NFKD", texto.lower())
    return "".join(c for c in descompuesto if not unicodedata.combining(c))


def _contiene(pregunta: str, palabras: Iterable[str]) -> bool:
    return any(p in pregunta for p in palabras)


def _valor(resultado: Resultado):
    if isinstance(resultado, Exito):
        return resultado.valor
    raise RuntimeError(f"No se pudo obtener datos para el tutor: {resultado!r}")


def _situacion(cursos: List[CursoEstudiante]) -> str:
    en_curso = [c for c in cursos if c.estado_inscripcion == "TAKING"]
    if not en_curso:
        return "No tienes cursos en marcha este semestre, así que no hay nada en riesgo. ✅"

    lineas = [
        f"🔹 {c.materia}: {c.total_final:.2f}/20, asistencia {c.porcentaje_asistencia:.2f}% "
        f"({ETIQUETAS_ESTADO[c.estado]})"
        for c in en_curso
    ]
    en_riesgo = [c for c in en_curso if c.estado != EstadoAcademico.APPROVED]
    cierre = (
        f"\n\n⚠️ Atención con {len(en_riesgo)} materia(s); revisa tus actividades pendientes."
        if en_riesgo
        else "\n\n¡Vas muy bien! 🎉"
    )
    return "Así vas en tus cursos:\n\n" + "\n".join(lineas) + cierre


def _promedio(resumen: ResumenAcademico) -> str:
    if not resumen.aprobadas:
        return "Aún no tienes notas registradas para calcular un promedio."
    return (
        f"Tu promedio académico actual es de **{resumen.promedio:.2f}/20**, "
        f"calculado sobre {resumen.aprobadas} materias aprobadas. 📊"
    )


def _materias(resumen: ResumenAcademico, cursos: List[CursoEstudiante]) -> str:
    en_curso = [c for c in cursos if c.estado_inscripcion == "TAKING"]
    if not en_curso:
        return "Actualmente no estás matriculado en ninguna materia."
    lista = ", ".join(c.materia for c in en_curso)
    return (
        f"Este semestre (Nivel {resumen.nivel_actual}) estás cursando "
        f"**{len(en_curso)} materias**: \n\n🔹 {lista}. \n\n¡Organízate bien! 📅"
    )


def _saludo(resumen: ResumenAcademico) -> str:
    primer_nombre = resumen.nombre_completo.split(" ")[0]
    return (
        f"¡Hola {primer_nombre}! 🤖 Soy tu asistente académico. Pregúntame sobre tus "
        "notas, qué materias estás viendo o cómo vas en tus cursos."
    )


def construir_respuesta(
    pregunta: str, resumen: ResumenAcademico, obtener_cursos: Callable[[], List[CursoEstudiante]]
) -> str:
    texto = normalizar(pregunta)

    if _contiene(texto, ("situacion", "asistencia", "voy", "riesgo")):
        return _situacion(obtener_cursos())
    if _contiene(texto, ("nota", "promedio", "calificacion")):
        return _promedio(resumen)
    if _contiene(texto, ("materias", "cursando", "actual", "viendo")):
        return _materias(resumen, obtener_cursos())
    if _contiene(texto, ("hola", "buenos", "buenas", "que tal")):
        return _saludo(resumen)
    return MENSAJE_POR_DEFECTO


def responder(db: Session, estudiante_id: int, pregunta: str) -> Resultado[RespuestaTutor]:
    resumen = servicio_academico.resumen_academico(db, estudiante_id)
    if isinstance(resumen, NoEncontrado):
        return resumen

    try:
        texto = construir_respuesta(
            pregunta,
            _valor(resumen),
            lambda: _valor(servicio_academico.cursos_estudiante(db, estudiante_id)),
        )
    except Exception:
        logger.exception("⚠️ Tutor sin datos para el estudiante %s, respuesta de respaldo", estudiante_id)
        return Exito(
            RespuestaTutor(texto=MENSAJE_RESPALDO, fecha=datetime.now(timezone.utc), degradado=True)
        )

    return Exito(RespuestaTutor(texto=texto, fecha=datetime.now(timezone.utc)))
