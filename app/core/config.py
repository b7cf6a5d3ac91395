from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_host: str = "127.0.0.1"
    app_port: int = 8000
    log_level: str = "INFO"

    database_url: str = "sqlite+pysqlite:///:memory:"

    statsd_bind_host: str = "127.0.0.1"
    statsd_bind_port: int = 8000
    statsd_host: str = "127.0.0.1"
    statsd_port: int = 8125
    statsd_namespace: str = "analytics"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
