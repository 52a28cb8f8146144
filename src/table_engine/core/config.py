from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL

BASE_DIR = Path(__file__).resolve().parents[3]
INFRA_DIR = BASE_DIR / 'infra'

LOG_DIR = BASE_DIR / 'logs'

MAX_COMBINATION_SIZE_CEILING = 3


class Settings(BaseSettings):
    """Конфигурационный класс."""

    POSTGRES_DB: str = 'restaurant'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: str = 'postgres'
    POSTGRES_PORT: int = 5432
    POSTGRES_HOST: str = 'localhost'

    LOG_LEVEL: str = 'INFO'
    ENGINE_LOG_LEVEL: str = 'INFO'
    LOG_ROTATION: str = '10 MB'
    LOG_RETENTION: str = '14 days'

    DEFAULT_TURN_TIME_MINUTES: int = Field(default=120, ge=1)
    MAX_COMBINATION_SIZE: int = Field(
        default=MAX_COMBINATION_SIZE_CEILING,
        ge=1,
        le=MAX_COMBINATION_SIZE_CEILING,
    )
    MAX_COMBINATION_RESULTS: int = Field(default=10, ge=1)
    COUNT_PENDING_AS_OCCUPYING: bool = False

    CONFIRMATION_CODE_LENGTH: int = Field(default=6, ge=4)
    CONFIRMATION_CODE_ATTEMPTS: int = Field(default=5, ge=1)

    @property
    def db_url(self) -> URL:
        """Создает ссылку на подключение к Postgres."""
        return URL.create(
            drivername='postgresql+asyncpg',
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DB,
        )

    model_config = SettingsConfigDict(
        env_file=str(INFRA_DIR / '.env'),
        extra='allow',
    )


settings = Settings()
