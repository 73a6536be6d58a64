from pydantic_settings import BaseSettings
from functools import lru_cache
import os

class Settings(BaseSettings):
    # Supabase - the anon key is enough, row access is governed upstream
    supabase_url: str = ""
    supabase_anon_key: str = ""
    applications_table: str = "applications"
    supabase_timeout_seconds: float = 10.0

    # App Settings
    app_name: str = "JobTracker"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # API Settings
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"
    backend_host: str = "0.0.0.0"
    backend_port: int = int(os.getenv("PORT", "8000"))

    class Config:
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Vite-style names are accepted so the same .env serves the old frontend
        if not self.supabase_url:
            self.supabase_url = os.getenv("VITE_SUPABASE_URL", "")
        if not self.supabase_anon_key:
            self.supabase_anon_key = os.getenv("VITE_SUPABASE_ANON_KEY", "")
        self.supabase_url = self.supabase_url.rstrip("/")

    @property
    def rest_url(self) -> str:
        """Base URL of the PostgREST endpoint"""
        return f"{self.supabase_url}/rest/v1"

@lru_cache()
def get_settings() -> Settings:
    return Settings()
