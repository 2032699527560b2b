"""Configuration management for shortlinks."""

from typing import Dict, List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=5000,
        description="Port to listen on"
    )

    workers: int = Field(
        default=1,
        ge=1,
        description="Number of uvicorn worker processes. Each process keeps its own in-memory registry."
    )

    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed by CORS"
    )

    # Shortlink settings
    base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL for shortlinks when the request carries no usable host"
    )

    path_prefix: str = Field(
        default="",
        description="Path prefix for shortlinks (e.g., '/s' for /s/abc123)"
    )

    short_code_length: int = Field(
        default=6,
        ge=3,
        le=20,
        description="Length of generated shortcodes"
    )

    max_collision_retries: int = Field(
        default=10,
        ge=1,
        description="Generation attempts per code length before giving up"
    )

    default_validity_minutes: int = Field(
        default=30,
        gt=0,
        description="Validity applied when a request gives none"
    )

    max_validity_minutes: int = Field(
        default=525600,
        gt=0,
        description="Largest validity accepted from requests (one year)"
    )

    enable_custom_codes: bool = Field(
        default=True,
        description="Allow users to provide custom shortcodes"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    # Telemetry settings (log shipping is disabled without telemetry_url)
    telemetry_url: Optional[str] = Field(
        default=None,
        description="Base URL of the remote log API"
    )

    telemetry_stack: str = Field(
        default="backend",
        description="Stack name reported with every shipped log"
    )

    telemetry_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout for log API requests"
    )

    telemetry_email: str = Field(default="", description="Log API credential")
    telemetry_name: str = Field(default="", description="Log API credential")
    telemetry_roll_no: str = Field(default="", description="Log API credential")
    telemetry_access_code: str = Field(default="", description="Log API credential")
    telemetry_client_id: str = Field(default="", description="Log API credential")
    telemetry_client_secret: str = Field(default="", description="Log API credential")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @property
    def telemetry_enabled(self) -> bool:
        return bool(self.telemetry_url)

    def telemetry_credentials(self) -> Dict[str, str]:
        """Body for the log API's /auth endpoint."""
        return {
            "email": self.telemetry_email,
            "name": self.telemetry_name,
            "rollNo": self.telemetry_roll_no,
            "accessCode": self.telemetry_access_code,
            "clientID": self.telemetry_client_id,
            "clientSecret": self.telemetry_client_secret,
        }


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
