"""
Configuration management for the crawler.

Settings come from three layers: dataclass defaults, an optional YAML file and
the command line, in increasing order of precedence.
"""

import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field, fields
from urllib.parse import urlsplit


DEFAULT_OUTPUT_FILE = "sitemap.txt"
DEFAULT_MAX_WORKERS = 10
DEFAULT_MAX_QUEUED_TASKS = 10000


class ConfigError(ValueError):
    """Raised when configuration values are missing or invalid."""
    pass


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    root_url: str = ""
    output_file: str = DEFAULT_OUTPUT_FILE
    max_workers: int = DEFAULT_MAX_WORKERS
    max_queued_tasks: int = DEFAULT_MAX_QUEUED_TASKS
    user_agent: str = "sitecrawler/1.0"
    request_timeout: float = 30.0
    max_content_size: int = 10 * 1024 * 1024


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    console_level: str = "WARNING"
    file: str = "logs/crawler.log"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    metrics_enabled: bool = False
    prometheus_port: int = 8000


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


def _build_section(cls, data: Optional[Dict[str, Any]], section: str):
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown keys in '{section}' section: {', '.join(sorted(unknown))}")
    return cls(**data)


def is_crawlable_root(url: str) -> bool:
    """Check that a root URL is an absolute http(s) URL with a host."""
    try:
        parsed = urlsplit(url)
        return parsed.scheme in ('http', 'https') and bool(parsed.hostname)
    except ValueError:
        return False


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None

    def load_config(self, log_level: Optional[str] = None, **overrides) -> Config:
        """
        Load configuration from the YAML file (if any) and apply overrides.

        Args:
            log_level: Overrides both the file and console log levels
            **overrides: Crawler settings taken from the command line; ``None``
                values are ignored so file or default values stay in effect.

        Returns:
            Validated Config instance
        """
        config_data: Dict[str, Any] = {}
        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigError(f"Configuration file not found: {self.config_path}")
            try:
                with open(self.config_path, 'r') as file:
                    config_data = yaml.safe_load(file) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(config_data, dict):
                raise ConfigError(f"Configuration file must contain a mapping: {self.config_path}")

        crawler_config = _build_section(CrawlerConfig, config_data.get('crawler'), 'crawler')
        for key, value in overrides.items():
            if value is not None:
                setattr(crawler_config, key, value)

        self._config = Config(
            crawler=crawler_config,
            logging=_build_section(LoggingConfig, config_data.get('logging'), 'logging'),
            monitoring=_build_section(MonitoringConfig, config_data.get('monitoring'), 'monitoring'),
        )

        if log_level:
            self._config.logging.level = log_level
            self._config.logging.console_level = log_level

        self._validate_config()
        return self._config

    def _validate_config(self):
        """Validate configuration values."""
        crawler = self._config.crawler

        if not crawler.root_url:
            raise ConfigError("A root URL must be provided")

        if not is_crawlable_root(crawler.root_url):
            raise ConfigError("The entered start page is not a valid URL.")

        if crawler.max_workers < 1:
            raise ConfigError("max_workers must be at least 1")

        if crawler.max_queued_tasks < 1:
            raise ConfigError("max_queued_tasks must be at least 1")

        if crawler.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")

        if crawler.max_content_size <= 0:
            raise ConfigError("max_content_size must be positive")

        for level in (self._config.logging.level, self._config.logging.console_level):
            if not isinstance(getattr(logging, str(level).upper(), None), int):
                raise ConfigError(f"Unknown log level: {level}")

        logging.getLogger(__name__).debug("Configuration validation passed")


def load_config(config_path: Optional[str] = None, log_level: Optional[str] = None,
                **overrides) -> Config:
    """Load configuration from file and command-line overrides."""
    return ConfigManager(config_path).load_config(log_level=log_level, **overrides)
