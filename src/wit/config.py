"""
Wit Daemon Configuration Management
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wit.logic.schedule import TimeOrdering

STATE_FILE_NAME = "state.json"


class Settings(BaseSettings):
    """Application settings loaded from WIT_* environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="WIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # HTTP Binding
    host: str = Field(default="0.0.0.0", description="HTTP bind address")
    port: int = Field(default=7801, description="HTTP port")
    home_url: str = Field(default="", description="URL to display as a 'home' link")

    # State Storage
    cache_dir: Path = Field(
        default=Path("/var/lib/wit"), description="Directory holding state.json"
    )

    # Transmitter Configuration
    irsend_path: str = Field(default="/usr/bin/irsend", description="irsend executable")
    device: str = Field(default="/run/lirc/lircd", description="lircd device socket")
    lirc_config: str = Field(default="BRYANT", description="Remote name in the lircd config")
    irsend_mock: bool = Field(
        default=False, description="Use mock transmitter (no real hardware)"
    )
    opmodes: str = Field(
        default="COOL74,HEAT72", description="Operation modes (comma separated list)"
    )

    # Scheduler Configuration
    scheduler_interval_seconds: float = Field(
        default=5.0, gt=0, description="Seconds between scheduler cycles"
    )
    schedule_ordering: TimeOrdering = Field(
        default=TimeOrdering.LEGACY,
        description="Rule time comparison: legacy (hour and minute) or chronological",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    json_logs: bool = Field(default=True, description="Emit JSON logs instead of console output")
    log_file: Optional[str] = Field(default=None, description="Also log to this file")

    # API Configuration
    api_title: str = Field(default="Wit Climate Control API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")
    api_docs_enabled: bool = Field(default=True, description="Enable API documentation")

    @property
    def state_file(self) -> Path:
        return self.cache_dir / STATE_FILE_NAME

    @property
    def operation_modes(self) -> List[str]:
        return [mode.strip() for mode in self.opmodes.split(",") if mode.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
