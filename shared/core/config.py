import os
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv(
        "JWT_EXPIRE_MINUTES", 1440))  # 24 hours default

    # Login stand-in: these numbers get the super admin flag
    SUPER_ADMIN_PHONES: str = os.getenv("SUPER_ADMIN_PHONES", "723119356")

    DATABASE_URL: str | None = os.getenv("DATABASE_URL")
    DB_USER: str | None = os.getenv("DB_USER")
    DB_PASS: str | None = os.getenv("DB_PASS")
    DB_HOST: str | None = os.getenv("DB_HOST")
    DB_PORT: str | None = os.getenv("DB_PORT", "5432")
    DB_NAME: str | None = os.getenv("DB_NAME")

    # Gate pass
    ACCESS_CODE_MAX_ATTEMPTS: int = int(
        os.getenv("ACCESS_CODE_MAX_ATTEMPTS", 10))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS", "http://localhost:8080,http://127.0.0.1:8002")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def super_admin_phones(self) -> List[str]:
        return [p.strip() for p in self.SUPER_ADMIN_PHONES.split(",") if p.strip()]

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()


def build_database_url() -> str:
    if settings.DATABASE_URL:
        return settings.DATABASE_URL

    if settings.DB_HOST:
        return (
            f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"
        )

    return f"sqlite:///{os.path.join(BASE_DIR, 'karibu.db')}"


DATABASE_URL = build_database_url()
