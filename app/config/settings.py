from typing import Any, Literal

from pydantic import Field, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración de la aplicación utilizando Pydantic BaseSettings.
    Carga automáticamente las variables de entorno.
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Rehab Scheduling API"
    PROJECT_DESCRIPTION: str = "Agenda de visitas y ciclo de vida clínico para clínicas de fisioterapia"
    VERSION: str = "0.1.0"
    ALLOWED_HOSTS: str = Field("*", description="Orígenes permitidos para CORS, separados por coma")

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="Host de PostgreSQL")
    DB_PORT: int = Field(5432, description="Puerto de PostgreSQL")
    DB_NAME: str = Field("rehab", description="Nombre de la base de datos")
    DB_USER: str = Field("postgres", description="Usuario de PostgreSQL")
    DB_PASSWORD: str | None = Field(None, description="Contraseña de PostgreSQL")
    DB_ECHO: bool = Field(False, description="Log SQL queries (solo para debug)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(20, description="Tamaño del pool de conexiones")
    DB_MAX_OVERFLOW: int = Field(30, description="Máximo overflow del pool")
    DB_POOL_RECYCLE: int = Field(3600, description="Reciclar conexiones cada X segundos")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout para obtener conexión del pool")
    DB_COMMAND_TIMEOUT: int = Field(15, description="Timeout de cada sentencia SQL en segundos")

    # Redis Settings
    REDIS_HOST: str = Field("localhost", description="Host de Redis")
    REDIS_PORT: int = Field(6379, description="Puerto de Redis")
    REDIS_DB: int = Field(0, description="Base de datos de Redis")
    REDIS_PASSWORD: str | None = Field(None, description="Contraseña de Redis")

    # Scheduling Settings
    SCHEDULING_LOCK_BACKEND: Literal["memory", "redis"] = Field(
        "memory",
        description="Backend del lock por profesional y día: 'memory' (un solo worker) o 'redis' (varios workers)",
    )
    SCHEDULING_LOCK_TIMEOUT_SECONDS: float = Field(
        5.0, description="Tiempo máximo de espera para adquirir el lock de agenda"
    )
    SCHEDULING_LOCK_TTL_MS: int = Field(
        60000, description="Expiración del lock de agenda en Redis (ms), mayor que los timeouts de la base"
    )
    DEFAULT_VISIT_DURATION_MINUTES: int = Field(30, description="Duración por defecto de una visita")
    MAX_VISIT_DURATION_MINUTES: int = Field(480, description="Duración máxima aceptada para una visita")

    # Application Settings
    DEBUG: bool = Field(False, description="Modo de depuración")
    ENVIRONMENT: str = Field("production", description="Entorno de ejecución")
    LOG_LEVEL: str = Field("INFO", description="Nivel de logging")

    # Sentry Configuration
    SENTRY_DSN: str | None = Field(default=None, description="Sentry DSN for error tracking")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignorar campos extras en lugar de generar un error
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v):
        if v < 0:
            raise ValueError("DB_MAX_OVERFLOW must be 0 or greater")
        if v > 200:
            raise ValueError("DB_MAX_OVERFLOW should not exceed 200")
        return v

    @field_validator("DEFAULT_VISIT_DURATION_MINUTES", "MAX_VISIT_DURATION_MINUTES")
    @classmethod
    def validate_visit_duration(cls, v):
        if v < 1:
            raise ValueError("Visit durations must be at least 1 minute")
        if v > 24 * 60:
            raise ValueError("Visit durations should not exceed one day")
        return v

    @field_validator("SCHEDULING_LOCK_TIMEOUT_SECONDS")
    @classmethod
    def validate_lock_timeout(cls, v):
        if v <= 0:
            raise ValueError("SCHEDULING_LOCK_TIMEOUT_SECONDS must be positive")
        return v

    @model_validator(mode="after")
    def validate_lock_ttl(self) -> "Settings":
        # El lock debe sobrevivir a la espera del pool más la escritura
        db_budget_ms = (self.DB_POOL_TIMEOUT + self.DB_COMMAND_TIMEOUT) * 1000
        if self.SCHEDULING_LOCK_TTL_MS <= db_budget_ms:
            raise ValueError(
                f"SCHEDULING_LOCK_TTL_MS ({self.SCHEDULING_LOCK_TTL_MS}) must exceed "
                f"DB_POOL_TIMEOUT + DB_COMMAND_TIMEOUT ({db_budget_ms} ms)"
            )
        return self

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return level

    @computed_field
    @property
    def database_url(self) -> str:
        """Construye la URL de conexión a PostgreSQL"""
        if self.DB_PASSWORD:
            return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"postgresql://{self.DB_USER}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def redis_url(self) -> str:
        """Construye la URL de conexión a Redis"""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @computed_field
    @property
    def allowed_origins(self) -> list[str]:
        """Lista de orígenes CORS a partir de ALLOWED_HOSTS"""
        return [host.strip() for host in self.ALLOWED_HOSTS.split(",") if host.strip()]

    @computed_field
    @property
    def is_development(self) -> bool:
        """Determina si está en modo desarrollo"""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]


# Singleton para configuración
_settings_instance = None


def get_settings() -> Settings:
    """
    Retorna una instancia cacheada de la configuración.
    Esto evita cargar las variables de entorno múltiples veces.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
