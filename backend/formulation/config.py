"""
Configuration settings using Pydantic BaseSettings.

卷烟辅材设计建模软件 - 配置模块
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Dict, Optional


class Settings(BaseSettings):
    """Application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_name: str = "卷烟辅材设计建模软件"
    app_version: str = "1.0.0"
    debug: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite:///./formulation.db"
    database_echo: bool = False

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000"
    ]

    # Regression
    min_regression_samples: int = 6  # 5 predictors + intercept
    allow_rank_deficient: bool = True

    # Recommendation search
    default_recommend_count: int = 100
    max_recommend_count: int = 1000
    max_search_candidates: int = 2_000_000
    search_chunk_size: int = 65_536
    search_time_budget_seconds: Optional[float] = None

    # Grid steps in UI units (ventilation and citrate in percent)
    default_steps: Dict[str, float] = {
        "filter_ventilation": 5,
        "filter_pressure_drop": 200,
        "permeability": 5,
        "quantitative": 2,
        "citrate": 0.4,
    }

    # Default data
    seed_default_samples: bool = True
    default_sample_group: str = "default"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
