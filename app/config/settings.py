from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Database
    database_url: str

    # JWT
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 120

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    seed_on_startup: bool = True

    # CORS
    allowed_origins: List[str] = ["*"]

    # Evaluación
    umbral_asistencia: float = 60.0
    nota_aprobacion: float = 14.0
    nota_suspenso: float = 9.0

    @property
    def database_url_sync(self) -> str:
        """Convert async database URL to sync"""
        if self.database_url.startswith("postgresql+asyncpg://"):
            return self.database_url.replace(
                "postgresql+asyncpg://", "postgresql+psycopg2://"
            )
        elif self.database_url.startswith("postgresql://"):
            return self.database_url.replace("postgresql://", "postgresql+psycopg2://")
        else:
            return self.database_url

    @property
    def es_sqlite(self) -> bool:
        return self.database_url_sync.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
