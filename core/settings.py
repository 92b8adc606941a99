from functools import lru_cache
from typing import List, Literal

from pydantic import BaseModel, Field, PostgresDsn, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    ENVIRONMENT: Literal["local", "dev", "prod"] = Field(default="local")
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=False)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3001)
    CORS_ORIGINS: List[str] = Field(default=["*"])
    MAX_BODY_BYTES: int = Field(default=1024 * 1024)

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "dev"


class PgDbSettings(CustomSettings):
    POSTGRES_ENGINE: str = Field(default="postgresql+asyncpg")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: SecretStr = Field(default="postgres")
    POSTGRES_DB: str = Field(default="support_chat")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: str = Field(default="")
    AUTO_CREATE_SCHEMA: bool = Field(default=False)

    @model_validator(mode="before")
    def validate_postgres_dsn(cls, data: dict):
        if isinstance(data, dict) and not data.get("DATABASE_URL"):
            password = data.get("POSTGRES_PASSWORD", "postgres")
            if isinstance(password, SecretStr):
                password = password.get_secret_value()
            _built_uri = PostgresDsn.build(
                scheme=data.get("POSTGRES_ENGINE", "postgresql+asyncpg"),
                username=data.get("POSTGRES_USER", "postgres"),
                password=password,
                host=data.get("POSTGRES_HOST", "localhost"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=data.get("POSTGRES_DB", "support_chat"),
            ).unicode_string()
            data["DATABASE_URL"] = _built_uri
        return data


class LLMSettings(CustomSettings):
    """Configuration for the hosted chat-completion provider.

    Env vars:
    - GROQ_API_KEY (empty disables completions, the process still starts)
    - LLM_BASE_URL
    - LLM_MODEL
    """

    GROQ_API_KEY: SecretStr = Field(default="")
    LLM_BASE_URL: str = Field(default="https://api.groq.com/openai/v1")
    LLM_MODEL: str = Field(default="llama-3.3-70b-versatile")
    LLM_TEMPERATURE: float = Field(default=0.7)
    LLM_MAX_TOKENS: int = Field(default=500)
    HISTORY_WINDOW: int = Field(default=10)


class ChatSettings(CustomSettings):
    MAX_MESSAGE_LENGTH: int = Field(default=2000)
    # Serialize concurrent requests on the same session (off keeps the legacy behaviour)
    SERIALIZE_SESSIONS: bool = Field(default=False)


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: PgDbSettings = Field(default_factory=PgDbSettings)
    LLM: LLMSettings = Field(default_factory=LLMSettings)
    CHAT: ChatSettings = Field(default_factory=ChatSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()
