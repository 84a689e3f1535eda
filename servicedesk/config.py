"""Application configuration"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Supabase
    supabase_url: str
    supabase_service_role_key: str
    supabase_anon_key: str

    # Tables
    tickets_table: str = "tickets"
    roles_table: str = "user_roles"
    profiles_table: str = "profiles"

    # Realtime change feed from Supabase (postgres_changes on the tickets table)
    realtime_enabled: bool = False
    realtime_schema: str = "public"

    # Application
    environment: str = "development"
    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
