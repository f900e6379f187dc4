"""Configuration management for CloudWatch Exporter"""
from pathlib import Path
from typing import Literal, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Process settings read from the environment"""

    # Rule file
    config_file: Path = Field(default=Path("config.yml"), description="YAML rule file")

    # Scrape tuning
    cloudwatch_threads: int = Field(default=10, ge=1, description="Rules scraped in parallel")
    cloudwatch_maxconnections: int = Field(default=150, ge=1, description="Max HTTP connections to CloudWatch")
    scrape_timeout_seconds: float = Field(default=300.0, gt=0, description="Upper bound on one scrape")

    # Server settings
    metrics_port: int = Field(default=9106, ge=1, le=65535, description="Metrics server port")
    metrics_host: str = Field(default="0.0.0.0", description="Metrics server host")
    enable_request_logging: bool = Field(default=True, description="Enable HTTP request logging")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")

    # Service settings
    service_name: str = Field(default="cloudwatch-exporter", description="Service name")
    service_version: str = Field(default="1.0.0", description="Service version")

    class Config:
        env_prefix = ""
        case_sensitive = False

    @validator('log_level', pre=True)
    def normalize_log_level(cls, v):
        """Accept log levels in any case"""
        if isinstance(v, str):
            return v.upper()
        return v

    @validator('log_file')
    def ensure_parent_directories(cls, v):
        """Ensure parent directories exist for file paths"""
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v
