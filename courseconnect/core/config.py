from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import PostgresDsn, RedisDsn


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    # Full SQLAlchemy URL; takes precedence over the POSTGRES_* parts
    url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    host: str = Field(default="localhost", alias="POSTGRES_HOST")
    port: int = Field(default=5432, alias="POSTGRES_DB_PORT")
    db_name: str = Field(default="courseconnect", alias="POSTGRES_DB_NAME")
    user: str = Field(default="postgres", alias="POSTGRES_DB_USER")
    password: str = Field(default="postgres", alias="POSTGRES_DB_PASSWORD")
    create_tables: bool = Field(default=True, alias="DB_CREATE_TABLES")

    @computed_field
    def connection_string(self) -> str:
        if self.url:
            return self.url
        return str(
            PostgresDsn(
                f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db_name}"
            )
        )


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    enabled: bool = Field(default=False, alias="REDIS_ENABLED")
    host: str = Field(default="localhost", alias="REDIS_HOST")
    port: int = Field(default=6379, alias="REDIS_PORT")
    password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    db: int = Field(default=0, alias="REDIS_DB")
    profile_ttl_seconds: int = Field(default=7 * 24 * 3600, alias="REDIS_PROFILE_TTL")

    @computed_field
    def dsn(self) -> RedisDsn:
        if self.password:
            return RedisDsn(
                f"redis://:{self.password}@{self.host}:{self.port}/{self.db}"
            )
        else:
            return RedisDsn(f"redis://{self.host}:{self.port}/{self.db}")


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    issuer: str = Field(default="https://auth.courseconnect.local", alias="JWT_ISSUER")
    application_id: str = Field(default="courseconnect", alias="JWT_APPLICATION_ID")
    token_lifetime_seconds: int = Field(
        default=3600, alias="JWT_TOKEN_LIFETIME_SECONDS"
    )
    # PEM file for the RS256 signing key; generated in memory when unset
    private_key_path: Optional[str] = Field(default=None, alias="JWT_PRIVATE_KEY_PATH")
    channel_token_lifetime_seconds: int = Field(
        default=3600, alias="CHANNEL_TOKEN_LIFETIME_SECONDS"
    )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="courseconnect", alias="APP_NAME")
    version: str = Field(default="1.0.0", alias="APP_VERSION")
    api_prefix: str = Field(default="api", alias="API_PREFIX")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")
    jwt_secret: str = Field(alias="JWT_SECRET")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"], alias="CORS_ORIGINS"
    )

    @computed_field
    def is_production(self) -> bool:
        return self.mode not in ("dev", "test")

    @computed_field
    def is_testing(self) -> bool:
        return self.mode == "test"


class DocumentSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    extraction_timeout_seconds: float = Field(
        default=60.0, alias="EXTRACTION_TIMEOUT_SECONDS"
    )
    ocr_timeout_seconds: float = Field(default=120.0, alias="OCR_TIMEOUT_SECONDS")
    ocr_language: str = Field(default="eng", alias="OCR_LANGUAGE")


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    media_dir: str = Field(default="media", alias="MEDIA_DIR")
    upload_attempts: int = Field(default=3, alias="UPLOAD_ATTEMPTS")
    upload_retry_delay_seconds: float = Field(
        default=1.0, alias="UPLOAD_RETRY_DELAY_SECONDS"
    )
    max_image_dimension: int = Field(default=400, alias="MAX_IMAGE_DIMENSION")
    jpeg_quality: int = Field(default=80, alias="JPEG_QUALITY")


class SessionSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    idle_seconds: int = Field(default=1800, alias="SESSION_IDLE_SECONDS")
    sweep_interval_seconds: int = Field(default=60, alias="SESSION_SWEEP_INTERVAL")
    exam_time_limit_minutes: int = Field(default=30, alias="EXAM_TIME_LIMIT_MINUTES")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    database: DatabaseSettings = Field(default_factory=lambda: DatabaseSettings())
    redis: RedisSettings = Field(default_factory=lambda: RedisSettings())
    jwt: JWTSettings = Field(default_factory=lambda: JWTSettings())
    documents: DocumentSettings = Field(default_factory=lambda: DocumentSettings())
    storage: StorageSettings = Field(default_factory=lambda: StorageSettings())
    sessions: SessionSettings = Field(default_factory=lambda: SessionSettings())

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    openrouter_api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")

    # Model provider selection: "google" or "openrouter"
    model_provider: str = Field(default="google", alias="MODEL_PROVIDER")
    google_model: str = Field(default="gemini-2.0-flash", alias="GOOGLE_MODEL")
    openrouter_model: str = Field(
        default="openai/gpt-4o-mini", alias="OPENROUTER_MODEL"
    )

    @computed_field
    def api_root(self) -> str:
        return f"/{self.app.api_prefix.strip('/')}"


settings = Settings()
