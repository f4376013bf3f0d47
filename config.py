"""
Configuration module for the Clinic Scheduling App.
Loads settings from environment variables with Azure OpenAI and Supabase support.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Azure OpenAI Configuration (administrator assistant)
    azure_openai_endpoint: str = Field(
        default="",
        alias="AZURE_OPENAI_ENDPOINT",
        description="Azure OpenAI endpoint URL"
    )
    azure_openai_deployment: str = Field(
        default="gpt-4o",
        alias="AZURE_OPENAI_DEPLOYMENT",
        description="Azure OpenAI deployment name"
    )
    azure_openai_api_version: str = Field(
        default="2024-10-21",
        alias="AZURE_OPENAI_API_VERSION",
        description="Azure OpenAI API version"
    )
    assistant_max_tool_rounds: int = Field(
        default=5,
        alias="ASSISTANT_MAX_TOOL_ROUNDS",
        description="Maximum tool-call round trips per assistant message"
    )

    # Application Configuration
    app_host: str = Field(
        default="0.0.0.0",
        alias="APP_HOST",
        description="Host to bind the application"
    )
    app_port: int = Field(
        default=8000,
        alias="APP_PORT",
        description="Port to bind the application"
    )

    # Data Store Configuration
    storage_backend: str = Field(
        default="file",
        alias="STORAGE_BACKEND",
        description="Key-value backend for the schedule blob: file, memory or cosmos"
    )
    data_store_path: str = Field(
        default="./data/schedule_store.json",
        alias="DATA_STORE_PATH",
        description="Path to the JSON file used by the file backend"
    )
    storage_key: str = Field(
        default="scheduleData",
        alias="STORAGE_KEY",
        description="Key under which the whole schedule is stored"
    )
    id_strategy: str = Field(
        default="sequential",
        alias="ID_STRATEGY",
        description="Id generation: sequential (length + timestamp) or uuid"
    )
    clinic_timezone: str = Field(
        default="UTC",
        alias="CLINIC_TIMEZONE",
        description="IANA time zone used for naive booking times and monthly reports"
    )

    # Identity Provider Configuration
    identity_provider: str = Field(
        default="local",
        alias="IDENTITY_PROVIDER",
        description="Administrator identity backend: local or supabase"
    )
    supabase_url: str = Field(
        default="",
        alias="SUPABASE_URL",
        description="Supabase project URL"
    )
    supabase_anon_key: str = Field(
        default="",
        alias="SUPABASE_ANON_KEY",
        description="Supabase anonymous API key"
    )
    admin_email: str = Field(
        default="admin@clinic.local",
        alias="ADMIN_EMAIL",
        description="Seed administrator account for the local identity provider"
    )
    admin_password: str = Field(
        default="admin123",
        alias="ADMIN_PASSWORD",
        description="Seed administrator password for the local identity provider"
    )
    session_ttl_hours: int = Field(
        default=24,
        alias="SESSION_TTL_HOURS",
        description="Lifetime of an administrator session"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level"
    )

    # Branding and report formatting
    brand_name: str = Field(
        default="Clinic Scheduling",
        alias="BRAND_NAME",
        description="Application name shown in headers and printed reports"
    )
    currency_symbol: str = Field(
        default="R$",
        alias="CURRENCY_SYMBOL",
        description="Currency symbol used in financial reports"
    )
    currency_decimal_comma: bool = Field(
        default=True,
        alias="CURRENCY_DECIMAL_COMMA",
        description="Format amounts as 1.234,56 instead of 1,234.56"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
