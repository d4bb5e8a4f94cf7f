from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.security import Identidad, verify_token

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identidad:
    """
    Obtener la identidad (id y rol) desde el token JWT
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudo validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    identidad = verify_token(credentials.credentials)
    if identidad is None:
        raise credentials_exception

    return identidad


def _require_rol(rol: str):
    def dependencia(identidad: Identidad = Depends(get_current_user)) -> Identidad:
        if identidad.rol != rol:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Se requiere rol {rol}",
            )
        return identidad

    return dependencia


require_docente = _require_rol("DOCENTE")
require_estudiante = _require_rol("ESTUDIANTE")
