from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for writes that bypass RLS

    # App
    app_name: str = "mall-admin-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    timezone: str = "UTC"  # used to cut day buckets in analytics

    # Session cache of the current admin's roles/permissions
    session_cache_ttl_seconds: int = 60
    session_cache_max_size: int = 500
    session_bootstrap_timeout_seconds: float = 10.0

    # Promotions
    promotion_expiring_window_days: int = 3
    promotion_expiry_interval_seconds: int = 0  # 0 disables the background expiry loop

    # Listing / analytics
    activity_default_days: int = 30
    default_page_size: int = 10
    max_page_size: int = 100

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
