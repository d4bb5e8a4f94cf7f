"""
Motor de calificaciones y asistencia.

Funciones puras sobre datos planos (actividades, notas y estados de asistencia):
no dependen de la base de datos ni de FastAPI. La capa de servicio carga los
registros, los convierte a estas estructuras y publica el resultado.

Toda la aritmética se hace con ``Decimal`` y redondeo ``ROUND_HALF_UP`` a dos
decimales para que 6.3 + 3.75 + 1.0 sea exactamente 11.05.
"""

import enum
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union


class CategoriaActividad(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    GRUPAL = "GRUPAL"
    MEDIO = "MEDIO"
    FINAL = "FINAL"


class EstadoAsistencia(str, enum.Enum):
    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"


class EstadoAcademico(str, enum.Enum):
    APPROVED = "APPROVED"
    SUSPENDED = "SUSPENDED"
    FAILED = "FAILED"
    FAILED_BY_ATTENDANCE = "FAILED_BY_ATTENDANCE"


NOTA_MINIMA = Decimal("0")
NOTA_MAXIMA = Decimal("20")
CENTAVO = Decimal("0.01")

# Puntos sobre 20 que aporta cada categoría al total del curso
PESOS_CATEGORIA: Dict[CategoriaActividad, int] = {
    CategoriaActividad.INDIVIDUAL: 7,
    CategoriaActividad.GRUPAL: 5,
    CategoriaActividad.MEDIO: 2,
    CategoriaActividad.FINAL: 6,
}

ETIQUETAS_CATEGORIA: Dict[CategoriaActividad, str] = {
    CategoriaActividad.INDIVIDUAL: "Gestión Individual",
    CategoriaActividad.GRUPAL: "Gestión Grupal",
    CategoriaActividad.MEDIO: "Examen Medio Semestre",
    CategoriaActividad.FINAL: "Examen Final",
}

PUNTOS_ASISTENCIA: Dict[EstadoAsistencia, int] = {
    EstadoAsistencia.PRESENT: 2,
    EstadoAsistencia.EXCUSED: 2,
    EstadoAsistencia.LATE: 1,
    EstadoAsistencia.ABSENT: 0,
}
PUNTOS_MAXIMOS_SESION = 2

Numero = Union[int, float, Decimal]


class NotaFueraDeRango(ValueError):
    """La nota no está en el intervalo [0, 20]."""

    def __init__(self, nota):
        self.nota = nota
        super().__init__(f"La nota debe estar entre 0 y 20 (recibido: {nota})")


@dataclass(frozen=True)
class PoliticaEvaluacion:
    """Umbrales que convierten un total y una asistencia en un estado."""

    umbral_asistencia: Decimal = Decimal("60")
    nota_aprobacion: Decimal = Decimal("14")
    nota_suspenso: Decimal = Decimal("9")

    @classmethod
    def desde_settings(cls, settings) -> "PoliticaEvaluacion":
        return cls(
            umbral_asistencia=Decimal(str(settings.umbral_asistencia)),
            nota_aprobacion=Decimal(str(settings.nota_aprobacion)),
            nota_suspenso=Decimal(str(settings.nota_suspenso)),
        )


@dataclass(frozen=True)
class ActividadEvaluable:
    id: int
    categoria: CategoriaActividad


@dataclass(frozen=True)
class NotaRegistrada:
    actividad_id: int
    nota: Optional[Numero]


@dataclass
class ResumenCategoria:
    categoria: CategoriaActividad
    etiqueta: str
    peso: int
    cantidad: int
    suma: Decimal
    promedio: Decimal
    aporte: Decimal


@dataclass
class ResultadoCurso:
    categorias: List[ResumenCategoria]
    total_final: Decimal
    porcentaje_asistencia: Decimal
    estado: EstadoAcademico


@dataclass
class EntradaEstudiante:
    """Datos de un estudiante inscrito necesarios para armar su fila."""

    estudiante_id: int
    inscripcion_id: int
    nombre_completo: str
    notas: Sequence[NotaRegistrada] = ()
    asistencias: Sequence[EstadoAsistencia] = ()


@dataclass
class FilaMatriz:
    estudiante_id: int
    inscripcion_id: int
    nombre_completo: str
    notas: Dict[int, Optional[float]]
    desglose: Dict[CategoriaActividad, Decimal]
    total_final: Decimal
    porcentaje_asistencia: Decimal
    estado: EstadoAcademico


@dataclass
class EstadisticasCurso:
    total_estudiantes: int = 0
    aprobados: int = 0
    suspensos: int = 0
    reprobados: int = 0
    reprobados_por_asistencia: int = 0
    promedio_curso: Decimal = field(default_factory=lambda: Decimal("0.00"))


def redondear(valor: Decimal) -> Decimal:
    return valor.quantize(CENTAVO, rounding=ROUND_HALF_UP)


def validar_nota(nota: Numero) -> Decimal:
    """Convertir una nota a ``Decimal`` rechazando valores fuera de [0, 20]."""
    if isinstance(nota, bool):
        raise NotaFueraDeRango(nota)
    try:
        valor = Decimal(str(nota))
    except ArithmeticError:
        raise NotaFueraDeRango(nota) from None
    if not valor.is_finite() or valor < NOTA_MINIMA or valor > NOTA_MAXIMA:
        raise NotaFueraDeRango(nota)
    return valor


def validar_pesos(pesos: Mapping[CategoriaActividad, int]) -> None:
    faltantes = [c.value for c in CategoriaActividad if c not in pesos]
    if faltantes:
        raise ValueError(f"Faltan pesos para las categorías: {', '.join(faltantes)}")
    total = sum(pesos[c] for c in CategoriaActividad)
    if Decimal(total) != NOTA_MAXIMA:
        raise ValueError(f"Los pesos deben sumar 20 (suman {total})")


def acumular_categorias(
    actividades: Iterable[ActividadEvaluable],
    notas: Iterable[NotaRegistrada],
    pesos: Mapping[CategoriaActividad, int] = PESOS_CATEGORIA,
) -> List[ResumenCategoria]:
    """
    Agrupar las notas de un estudiante por categoría.

    Solo cuentan las notas no nulas de actividades del curso. Una categoría
    sin notas tiene promedio 0 y aporte 0. El aporte reescala el promedio
    (sobre 20) a los puntos que la categoría tiene asignados; se guarda sin
    redondear para que solo el total se redondee.
    """
    validar_pesos(pesos)

    categoria_por_actividad = {a.id: CategoriaActividad(a.categoria) for a in actividades}
    sumas = {c: Decimal("0") for c in CategoriaActividad}
    cantidades = {c: 0 for c in CategoriaActividad}

    for registro in notas:
        if registro.nota is None:
            continue
        categoria = categoria_por_actividad.get(registro.actividad_id)
        if categoria is None:
            continue
        sumas[categoria] += validar_nota(registro.nota)
        cantidades[categoria] += 1

    resumen = []
    for categoria in CategoriaActividad:
        peso = pesos[categoria]
        cantidad = cantidades[categoria]
        if cantidad:
            promedio = redondear(sumas[categoria] / cantidad)
            aporte = promedio * peso / NOTA_MAXIMA
        else:
            promedio = Decimal("0.00")
            aporte = Decimal("0.00")

        resumen.append(
            ResumenCategoria(
                categoria=categoria,
                etiqueta=ETIQUETAS_CATEGORIA[categoria],
                peso=peso,
                cantidad=cantidad,
                suma=sumas[categoria],
                promedio=promedio,
                aporte=aporte,
            )
        )

    return resumen


def calcular_porcentaje_asistencia(
    estados: Iterable[Union[EstadoAsistencia, str]]
) -> Decimal:
    """Porcentaje de asistencia ponderado; 100 si aún no hay sesiones."""
    sesiones = 0
    puntos = 0
    for estado in estados:
        puntos += PUNTOS_ASISTENCIA[EstadoAsistencia(estado)]
        sesiones += 1

    if sesiones == 0:
        return Decimal("100.00")

    return redondear(Decimal(puntos) / Decimal(PUNTOS_MAXIMOS_SESION * sesiones) * 100)


def componer_total(categorias: Iterable[ResumenCategoria]) -> Decimal:
    total = sum((c.aporte for c in categorias), Decimal("0"))
    return redondear(min(max(total, NOTA_MINIMA), NOTA_MAXIMA))


def determinar_estado(
    total_final: Decimal,
    porcentaje_asistencia: Decimal,
    politica: PoliticaEvaluacion = PoliticaEvaluacion(),
) -> EstadoAcademico:
    # La asistencia se evalúa antes que la nota
    if porcentaje_asistencia < politica.umbral_asistencia:
        return EstadoAcademico.FAILED_BY_ATTENDANCE
    if total_final >= politica.nota_aprobacion:
        return EstadoAcademico.APPROVED
    if total_final >= politica.nota_suspenso:
        return EstadoAcademico.SUSPENDED
    return EstadoAcademico.FAILED


def evaluar_curso(
    actividades: Sequence[ActividadEvaluable],
    notas: Iterable[NotaRegistrada],
    asistencias: Iterable[Union[EstadoAsistencia, str]],
    pesos: Mapping[CategoriaActividad, int] = PESOS_CATEGORIA,
    politica: PoliticaEvaluacion = PoliticaEvaluacion(),
) -> ResultadoCurso:
    """Evaluación completa de un estudiante en un paralelo."""
    categorias = acumular_categorias(actividades, notas, pesos)
    total_final = componer_total(categorias)
    porcentaje = calcular_porcentaje_asistencia(asistencias)

    return ResultadoCurso(
        categorias=categorias,
        total_final=total_final,
        porcentaje_asistencia=porcentaje,
        estado=determinar_estado(total_final, porcentaje, politica),
    )


def ensamblar_matriz(
    actividades: Sequence[ActividadEvaluable],
    estudiantes: Iterable[EntradaEstudiante],
    pesos: Mapping[CategoriaActividad, int] = PESOS_CATEGORIA,
    politica: PoliticaEvaluacion = PoliticaEvaluacion(),
) -> List[FilaMatriz]:
    """Una fila por estudiante con celdas por actividad y totales."""
    filas = []
    for entrada in estudiantes:
        notas_por_actividad = {n.actividad_id: n.nota for n in entrada.notas}
        resultado = evaluar_curso(
            actividades, entrada.notas, entrada.asistencias, pesos, politica
        )

        celdas = {}
        for actividad in actividades:
            nota = notas_por_actividad.get(actividad.id)
            celdas[actividad.id] = float(nota) if nota is not None else None

        filas.append(
            FilaMatriz(
                estudiante_id=entrada.estudiante_id,
                inscripcion_id=entrada.inscripcion_id,
                nombre_completo=entrada.nombre_completo,
                notas=celdas,
                desglose={c.categoria: redondear(c.aporte) for c in resultado.categorias},
                total_final=resultado.total_final,
                porcentaje_asistencia=resultado.porcentaje_asistencia,
                estado=resultado.estado,
            )
        )

    return filas


def calcular_estadisticas(filas: Sequence[FilaMatriz]) -> EstadisticasCurso:
    estadisticas = EstadisticasCurso(total_estudiantes=len(filas))
    if not filas:
        return estadisticas

    for fila in filas:
        if fila.estado == EstadoAcademico.APPROVED:
            estadisticas.aprobados += 1
        elif fila.estado == EstadoAcademico.SUSPENDED:
            estadisticas.suspensos += 1
        elif fila.estado == EstadoAcademico.FAILED:
            estadisticas.reprobados += 1
        else:
            estadisticas.reprobados_por_asistencia += 1

    suma = sum((f.total_final for f in filas), Decimal("0"))
    estadisticas.promedio_curso = redondear(suma / len(filas))
    return estadisticas
