from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from app.config.settings import settings

ROLES = ("DOCENTE", "ESTUDIANTE", "ADMIN")


@dataclass(frozen=True)
class Identidad:
    id: int
    rol: str


def create_access_token(
    subject: int, rol: str, expires_delta: Optional[timedelta] = None
) -> str:
    if rol not in ROLES:
        raise ValueError(f"Rol desconocido: {rol}")

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(subject),
        "rol": rol,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> Optional[Identidad]:
    """Decodificar el token; None si es inválido, expiró o no trae un id numérico"""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    subject = payload.get("sub")
    rol = payload.get("rol")
    if subject is None or rol not in ROLES:
        return None

    try:
        return Identidad(id=int(subject), rol=rol)
    except (TypeError, ValueError):
        return None
