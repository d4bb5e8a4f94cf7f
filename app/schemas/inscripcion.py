from pydantic import BaseModel


class SolicitudInscripcion(BaseModel):
    paralelo_id: int


class InscripcionRealizada(BaseModel):
    inscripcion_id: int
    paralelo_id: int
    materia: str
    estado: str


class BajaInscripcion(BaseModel):
    paralelo_id: int
    eliminadas: int
    mensaje: str
