import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Exito(Generic[T]):
    valor: T


@dataclass(frozen=True)
class ErrorValidacion:
    mensaje: str


@dataclass(frozen=True)
class NoEncontrado:
    recurso: str
    identificador: Any = None

    @property
    def mensaje(self) -> str:
        return f"{self.recurso} no encontrado"


@dataclass(frozen=True)
class ErrorPersistencia:
    operacion: str


Resultado = Union[Exito[T], ErrorValidacion, NoEncontrado, ErrorPersistencia]


def resolver(resultado: "Resultado[T]") -> T:
    """Devolver el valor de un Exito o levantar la HTTPException equivalente"""
    if isinstance(resultado, Exito):
        return resultado.valor

    if isinstance(resultado, ErrorValidacion):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=resultado.mensaje
        )

    if isinstance(resultado, NoEncontrado):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=resultado.mensaje
        )

    if isinstance(resultado, ErrorPersistencia):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error interno del servidor",
        )

    raise TypeError(f"Resultado desconocido: {resultado!r}")
