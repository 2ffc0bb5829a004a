from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./skillforge.db"
    plan_store: Literal["sql", "local", "auto"] = "auto"
    local_store_path: str = "./skillforge-plans.json"

    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "qwen:latest"
    llm_timeout_seconds: float = 120.0
    roadmap_weeks: int = 4

    log_level: str = "INFO"
    log_dir: str = "logs"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def reset_db():
    Base.metadata.drop_all(bind=engine)
    create_db()


def create_db():
    # Tables register on Base at import time.
    import api.models.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
