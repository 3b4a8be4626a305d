"""
Process configuration.

Everything the service reads from the environment (or a `.env` file in the
working directory) is collected once at startup into a frozen `Settings`
object, which `main.create_app()` threads into the database pool.
"""

from typing import Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 3000
DEFAULT_DB_PORT = 5432

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigError(RuntimeError):
    pass


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
        frozen=True,
    )

    # A full DSN wins over the individual DB_* connection fields.
    database_url: str | None = Field(None, validation_alias="DATABASE_URL", repr=False)
    db_server: str = Field("localhost", validation_alias="DB_SERVER")
    db_port: int = Field(DEFAULT_DB_PORT, validation_alias="DB_PORT")
    db_user: str = Field("", validation_alias="DB_USER")
    db_password: str = Field("", validation_alias="DB_PASSWORD", repr=False)
    db_database: str = Field("", validation_alias="DB_DATABASE")
    db_encrypt: bool = Field(False, validation_alias="DB_ENCRYPT")
    db_trust_server_certificate: bool = Field(True, validation_alias="DB_TRUST_SERVER_CERTIFICATE")

    db_pool_min_size: int = Field(1, ge=0, validation_alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, ge=1, validation_alias="DB_POOL_MAX_SIZE")
    db_command_timeout: float = Field(30.0, gt=0, validation_alias="DB_COMMAND_TIMEOUT")

    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(DEFAULT_PORT, validation_alias="PORT")
    log_level: LogLevel = Field("INFO", validation_alias="LOG_LEVEL")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _check_connection(self) -> "Settings":
        if not self.database_url:
            missing = [
                name
                for name, value in (("DB_USER", self.db_user), ("DB_DATABASE", self.db_database))
                if not value
            ]
            if missing:
                raise ValueError(f"Missing required environment variables: {', '.join(missing)}.")
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError(
                f"DB_POOL_MIN_SIZE ({self.db_pool_min_size}) exceeds DB_POOL_MAX_SIZE ({self.db_pool_max_size})."
            )
        return self


def load_settings(**overrides: object) -> Settings:
    """
    Build `Settings`, reporting every invalid or missing variable in one
    `ConfigError`.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'settings'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc
