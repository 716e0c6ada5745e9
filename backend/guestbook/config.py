from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


PLACEHOLDER_PASSWORD = "change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = Field("development", alias="APP_ENV")

    api_host: str = Field("0.0.0.0", alias="API_HOST")
    api_port: int = Field(8000, alias="API_PORT")

    db_driver: str = Field("postgresql+psycopg2", alias="DB_DRIVER")
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: Optional[int] = Field(None, alias="DB_PORT")
    db_user: str = Field("guestbook_user", alias="DB_USER")
    db_password: SecretStr = Field(SecretStr(PLACEHOLDER_PASSWORD), alias="DB_PASSWORD")
    db_name: str = Field("simple_app_db", alias="DB_NAME")

    database_url_raw: Optional[str] = Field(None, alias="DATABASE_URL")

    sql_echo: bool = Field(False, alias="SQL_ECHO")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @property
    def database_url(self) -> str:
        """Explicit DATABASE_URL if given, otherwise one composed from the DB_* parts."""

        if self.database_url_raw:
            return self.database_url_raw
        url = URL.create(
            drivername=self.db_driver,
            username=self.db_user,
            password=self.db_password.get_secret_value(),
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)

    @property
    def uses_placeholder_password(self) -> bool:
        return not self.database_url_raw and self.db_password.get_secret_value() == PLACEHOLDER_PASSWORD


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
