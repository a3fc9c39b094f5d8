from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "sentient"
    schema_name: Optional[str] = None
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class S3Config(BaseSettings):
    """S3 configuration for narration audio."""

    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = "us-east-1"
    bucket_name: str = "sentient-audio"
    narration_prefix: str = "tts"
    signed_url_seconds: int = Field(default=60 * 60, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class PollyConfig(BaseSettings):
    """Amazon Polly configuration."""

    region: str = "us-east-1"
    default_voice_id: str = "Joanna"
    engine: str = "neural"

    model_config = SettingsConfigDict(
        env_prefix="POLLY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    region: str = Field(
        default="us-east-1",
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="amazon.nova-lite-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    embedding_model_id: str = Field(
        default="amazon.titan-embed-text-v2:0",
        validation_alias="BEDROCK_EMBEDDING_MODEL_ID",
    )
    max_tokens: int = Field(
        default=2000,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=8192,
    )
    temperature: float = Field(
        default=0.7,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    top_p: float = Field(
        default=0.9,
        validation_alias="BEDROCK_TOP_P",
        ge=0.0,
        le=1.0,
    )
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="BEDROCK_API_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class RetrievalConfig(BaseSettings):
    """Embedding lookup used to enrich the generation prompt."""

    enabled: bool = True
    match_count: int = Field(default=5, ge=1, le=50)
    min_similarity: float = Field(default=0.2, ge=-1.0, le=1.0)

    model_config = SettingsConfigDict(
        env_prefix="RETRIEVAL_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class NarrationConfig(BaseSettings):
    """Limits applied to meditation scripts and their narration."""

    phase_count: int = 6
    max_chars: int = Field(default=2000, ge=1)
    concurrency: int = Field(
        default=1,
        ge=1,
        description="How many phases are synthesised at once; 1 keeps the batch sequential.",
    )
    default_phase_seconds: int = Field(default=30, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="NARRATION_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class SecurityConfig(BaseSettings):
    """JWT verification for tokens issued by the auth provider."""

    jwt_secret_key: SecretStr = Field(
        default=SecretStr("change-me"),
        validation_alias="JWT_SECRET",
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    access_token_expires_minutes: int = Field(
        default=60,
        validation_alias="JWT_EXPIRATION_MINUTES",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Sentient Meditation Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/meditation_pipeline.log"

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # S3
    s3: S3Config = Field(default_factory=S3Config)

    # Polly
    polly: PollyConfig = Field(default_factory=PollyConfig)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Retrieval
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)

    # Narration
    narration: NarrationConfig = Field(default_factory=NarrationConfig)

    # Security
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
