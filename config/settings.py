"""
Configuration management for the timetable API.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Timetable Generation API"
    app_version: str = "1.0.0"

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False

    # Solver
    solver_timeout_seconds: float = 30
    solver_max_requirements: Optional[int] = None
    solver_backtracking_enabled: bool = False
    solver_max_relocations: int = 50

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
