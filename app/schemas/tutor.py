from pydantic import BaseModel, Field
from datetime import datetime


class PreguntaTutor(BaseModel):
    pregunta: str = Field(..., min_length=1, max_length=1000)


class RespuestaTutor(BaseModel):
    texto: str
    remitente: str = "ia"
    fecha: datetime
    degradado: bool = False
