"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_anon_key: str = ""

    # Storage backend: "supabase" or "memory" (local development only)
    store_backend: str = "supabase"

    # External search workflow (n8n)
    workflow_webhook_url: str = ""
    workflow_webhook_secret: str = ""
    workflow_callback_secret: str = ""
    workflow_trigger_timeout_seconds: float = 10.0
    simulated_completion_delay_seconds: float = 3.0

    # Timeout sweep
    cron_secret: str = ""
    job_timeout_minutes: int = 10

    # When true, callbacks and the reaper only move jobs that are still
    # pending/processing instead of overwriting unconditionally.
    conditional_transitions: bool = False

    # DeepSeek
    deepseek_api_key: str = ""
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    deepseek_model: str = "deepseek-chat"
    deepseek_timeout_seconds: float = 30.0

    # Web
    app_url: str = "http://localhost:3000"
    api_port: int = 8000
    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
