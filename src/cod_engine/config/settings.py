"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Keys
    fireworks_api_key: str = ""
    google_api_key: str = ""

    # Provider
    llm_provider: str = "fireworks"  # "fireworks" or "gemini"
    fireworks_base_url: str = "https://api.fireworks.ai/inference/v1"
    request_timeout_s: float = 120.0

    # Models (keys into the model registry, or raw provider paths)
    default_model: str = "deepseek-v3-0324"
    vision_model: str = "qwen2p5-vl-32b-instruct"
    gemini_model: str = "gemini-2.0-flash"

    # Sampling defaults
    temperature: float = 0.3
    top_p: float = 0.9
    top_k: int = 40
    max_tokens: int = 8192

    # Vision sampling
    vision_temperature: float = 0.3
    vision_max_tokens: int = 1000

    # Storage
    settings_db_path: str = "data/cod_settings.db"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"env_file": ".env", "env_prefix": "COD_"}
