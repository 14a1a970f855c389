from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"


class AppSettings(BaseSettings):
    APP_NAME: str = "CloudVault"
    APP_ENV: Literal["dev", "prod"] = "dev"
    APP_DEBUG: bool = False

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")


class CORSSettings(BaseSettings):
    CORS_ORIGINS: list[str] = ["http://127.0.0.1:5173", "http://localhost:5173"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    CORS_HEADERS: list[str] = ["Authorization", "Content-Type"]
    CORS_EXPOSE_HEADERS: list[str] = []

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")


class MongoSettings(BaseSettings):
    MONGO_HOST: str = "localhost"
    MONGO_PORT: int = 27017
    MONGO_DB: str = "cloudvault"
    MONGO_USER: str = ""
    MONGO_PWD: str = ""

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    @property
    def MONGO_URL(self) -> str:
        credentials = f"{self.MONGO_USER}:{self.MONGO_PWD}@" if self.MONGO_USER and self.MONGO_PWD else ""
        return f"mongodb://{credentials}{self.MONGO_HOST or 'localhost'}:{self.MONGO_PORT or 27017}"


class SentrySettings(BaseSettings):
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = Field(0.2, ge=0, le=1)
    SENTRY_SEND_DEFAULT_PII: bool = False

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")


class JWTSettings(BaseSettings):
    """Bearer tokens are verified locally with a shared secret or public key"""
    JWT_SECRET: str = ""
    JWT_ALGORITHMS: list[str] = ["HS256"]
    JWT_ISSUER: str = ""
    JWT_AUDIENCE: str = ""

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")


class MinioSettings(BaseSettings):
    MINIO_URL: str = "http://localhost:9000"
    MINIO_ACCESS_KEY: str = ""
    MINIO_SECRET_KEY: str = ""
    MINIO_BUCKET: str = "cloudvault-files"
    # Base for stored public urls, MINIO_URL when empty (e.g. a CDN in front of the bucket)
    MINIO_PUBLIC_URL: str = ""
    MINIO_URL_EXPIRES_MINUTES: int = Field(10, gt=0)

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    @property
    def MINIO_SSL(self) -> bool:
        return self.MINIO_URL.startswith("https://")


class Settings(AppSettings, CORSSettings, MongoSettings, SentrySettings, JWTSettings, MinioSettings):
    RELEASE: str | None = None
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")


settings = Settings()
