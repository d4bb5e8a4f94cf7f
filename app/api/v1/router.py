from fastapi import APIRouter

from app.api.v1 import docente, estudiante

api_router = APIRouter()

api_router.include_router(docente.router, prefix="/docente", tags=["👨‍🏫 Docente"])
api_router.include_router(
    estudiante.router, prefix="/estudiante", tags=["👨‍🎓 Estudiante"]
)
