"""
Configuration management for the Test Automation Service.

Handles environment variables, defaults, configuration files and
validation for all service components.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Any, Union

import yaml


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARN", "WARNING", "ERROR"]
VALID_BROWSERS = ["chromium", "firefox", "webkit", "chrome", "edge", "safari"]


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class Config:
    """Configuration class for the service with environment variable support."""

    # Environment detection
    ci_mode: bool = field(default=False)

    # Logging configuration
    log_level: str = field(default="INFO")
    log_format: str = field(default="text")
    logs_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")

    # Browser sessions
    browser_endpoint: str = field(default="")
    default_browser: str = field(default="chromium")
    headless: bool = field(default=True)
    base_url: str = field(default="http://localhost:3000")

    # External services
    notification_service_url: str = field(default="")
    monitoring_service_url: str = field(default="")
    report_base_url: str = field(default="http://localhost:3000/reports")

    # Timeouts and capacity
    step_timeout_ms: int = field(default=10000)
    notification_timeout_ms: int = field(default=5000)
    max_concurrent_sessions: int = field(default=4)

    def __post_init__(self):
        """Apply environment overrides and normalize values."""
        if os.getenv("CI", "").lower() == "true" and self.ci_mode is False:
            self.ci_mode = True

        log_env = os.getenv("TAS_LOG_LEVEL")
        if log_env:
            self.log_level = log_env
        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            self.log_level = "INFO"
        if self.log_level == "WARN":
            self.log_level = "WARNING"

        # JSON logs in CI unless explicitly set otherwise
        if self.ci_mode and self.log_format == "text":
            self.log_format = "json"

        self.logs_dir = Path(os.getenv("TAS_LOGS_DIR", str(self.logs_dir)))

        self.browser_endpoint = os.getenv("BROWSER_ENDPOINT", self.browser_endpoint)
        self.default_browser = os.getenv(
            "DEFAULT_BROWSER", self.default_browser
        ).lower()
        headless_env = os.getenv("TAS_HEADLESS")
        if headless_env is not None:
            self.headless = headless_env.lower() == "true"
        self.base_url = os.getenv("TEST_BASE_URL", self.base_url)

        self.notification_service_url = os.getenv(
            "NOTIFICATION_SERVICE_URL", self.notification_service_url
        )
        self.monitoring_service_url = os.getenv(
            "MONITORING_SERVICE_URL", self.monitoring_service_url
        )
        self.report_base_url = os.getenv("REPORT_BASE_URL", self.report_base_url)

        self.step_timeout_ms = _env_int("TAS_STEP_TIMEOUT_MS", self.step_timeout_ms)
        self.notification_timeout_ms = _env_int(
            "TAS_NOTIFICATION_TIMEOUT_MS", self.notification_timeout_ms
        )
        self.max_concurrent_sessions = _env_int(
            "TAS_MAX_CONCURRENT_SESSIONS", self.max_concurrent_sessions
        )

    @property
    def is_ci_mode(self) -> bool:
        """Check if running in CI environment."""
        return self.ci_mode

    @property
    def debug_enabled(self) -> bool:
        """Check if debug logging is enabled."""
        return self.log_level == "DEBUG"

    def get_log_file_path(self) -> Path:
        """Get the main log file path, creating the logs directory."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        return self.logs_dir / "test-automation.log"

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for logging."""
        return {
            "ci_mode": self.ci_mode,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "logs_dir": str(self.logs_dir),
            "browser_endpoint": self.browser_endpoint,
            "default_browser": self.default_browser,
            "headless": self.headless,
            "base_url": self.base_url,
            "notification_service_url": self.notification_service_url,
            "monitoring_service_url": self.monitoring_service_url,
            "report_base_url": self.report_base_url,
            "step_timeout_ms": self.step_timeout_ms,
            "notification_timeout_ms": self.notification_timeout_ms,
            "max_concurrent_sessions": self.max_concurrent_sessions,
        }

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        ci = os.getenv("CI", "").lower() == "true"
        return cls(ci_mode=ci, log_format="json" if ci else "text")

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Config":
        """
        Create configuration from a YAML or JSON file.

        Unknown keys are ignored. Environment variables still take
        precedence over file values.

        Args:
            path: Path to the configuration file

        Returns:
            Loaded configuration
        """
        from .exceptions import ValidationError

        path = Path(path)
        if not path.exists():
            raise ValidationError(
                f"Configuration file not found: {path}",
                validation_type="config",
                violations=[f"missing file: {path}"],
            )

        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}

        if not isinstance(data, dict):
            raise ValidationError(
                f"Configuration file must contain a mapping: {path}",
                validation_type="config",
                violations=["top-level value is not a mapping"],
            )

        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        if "logs_dir" in kwargs:
            kwargs["logs_dir"] = Path(kwargs["logs_dir"])
        return cls(**kwargs)

    def validate(self) -> None:
        """Validate configuration and raise ValidationError if invalid."""
        from .exceptions import ValidationError

        errors = []

        if self.log_level not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}"
            )

        if self.log_format not in ["text", "json"]:
            errors.append(f"Invalid log format: {self.log_format}")

        if self.default_browser not in VALID_BROWSERS:
            errors.append(
                f"Invalid browser: {self.default_browser}. Must be one of {VALID_BROWSERS}"
            )

        if not self.base_url:
            errors.append("Base URL is required")

        if self.step_timeout_ms <= 0:
            errors.append("step_timeout_ms must be positive")

        if self.notification_timeout_ms <= 0:
            errors.append("notification_timeout_ms must be positive")

        if self.max_concurrent_sessions < 1:
            errors.append("max_concurrent_sessions must be at least 1")

        if errors:
            message = "Configuration validation failed: " + "; ".join(errors)
            raise ValidationError(
                message,
                validation_type="config",
                violations=errors,
            )

