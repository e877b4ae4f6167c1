from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "postgresql+asyncpg://localhost/pdf_tutor"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_database_url(cls, v: str) -> str:
        """Convert postgres:// URLs to asyncpg format."""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://") and "+asyncpg" not in v:
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # API Keys
    anthropic_api_key: str = ""

    # AI Models
    claude_model: str = "claude-sonnet-4-5-20250929"  # Tutor answers
    claude_fast_model: str = "claude-haiku-4-5-20251001"  # Summaries
    tutor_temperature: float = 0.7
    tutor_max_tokens: int = 2048

    # File storage
    upload_dir: str = "uploads"
    public_file_url: str = "/api/uploads"
    max_upload_size_bytes: int = 10 * 1024 * 1024  # 10MB
    allowed_mime_types: list[str] = ["application/pdf"]

    # PDF extraction
    line_tolerance: float = 0.01  # Normalized y distance treated as the same line
    word_gap_tolerance: float = 0.02  # Normalized x gap that inserts a space
    max_extracted_text_length: int = 50000
    fragment_batch_size: int = 1000

    # Annotation suggestions
    annotation_max_per_query: int = 5
    annotation_max_total: int = 10
    annotation_max_per_phrase_page: int = 2
    annotation_fallback_phrases: int = 3
    annotation_max_candidates: int = 10
    annotation_default_color: str = "#ffff00"

    # Chat
    chat_history_limit: int = 10
    max_chat_message_length: int = 32000
    max_conversation_title_length: int = 50

    # Frontend
    frontend_url: str = "http://localhost:3000"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Rate limiting
    rate_limit_enabled: bool = False
    rate_limit_storage_uri: str = "memory://"
    rate_limit_chat_per_minute: int = 20
    rate_limit_upload_per_hour: int = 30
    rate_limit_general_per_minute: int = 100

    # Request size limits (uploads are the largest bodies we accept)
    max_request_size_bytes: int = 11 * 1024 * 1024
    max_json_request_size_bytes: int = 256 * 1024

    # Database pool
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800  # 30 minutes
    db_command_timeout: int = 60
    db_statement_timeout_ms: int = 60000  # Fragment inserts for large PDFs
    db_lock_timeout_ms: int = 10000

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
