"""
Configuration Management for LiveCounter

🔧 Unified Configuration System:
Dataclass based configuration for the counter service, with presets per
environment and overrides from dictionaries, JSON files and environment
variables.
"""

import json
import os
import secrets
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class CatchUpPolicy(Enum):
    """When a newly attached subscriber gets an immediate copy of the counter"""
    LATE_JOINERS = "late_joiners"  # only when the tick loop is already running
    ALWAYS = "always"


@dataclass
class SessionConfig:
    """Session actor configuration"""
    tick_interval: float = 1.0
    subscriber_buffer: int = 64
    catch_up: CatchUpPolicy = CatchUpPolicy.LATE_JOINERS
    idle_timeout: float = 300.0
    cleanup_interval: float = 60.0


@dataclass
class PersistenceConfig:
    """Durable store configuration"""
    backend: str = "sql"
    url: str = "sqlite:///livecounter.db"
    echo: bool = False


@dataclass
class WebConfig:
    """Web server configuration"""
    host: str = "localhost"
    port: int = 8000
    debug: bool = False
    secret_key: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class ApplicationConfig:
    """Complete application configuration"""
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    session: SessionConfig = field(default_factory=SessionConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def for_environment(cls, environment: Environment) -> 'ApplicationConfig':
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.debug = True
            config.web.debug = True
            config.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            config.persistence.backend = "memory"
            config.persistence.url = "sqlite://"
            config.logging.level = "WARNING"

        elif environment == Environment.PRODUCTION:
            config.debug = False
            config.web.debug = False
            config.web.host = "0.0.0.0"
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary"""
        environment = Environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        config = cls.for_environment(environment)

        if "debug" in config_dict:
            config.debug = bool(config_dict["debug"])

        for section in ("session", "persistence", "web", "logging"):
            target = getattr(config, section)
            for key, value in config_dict.get(section, {}).items():
                if not hasattr(target, key):
                    raise ValueError(f"Unknown {section} setting: {key}")
                if section == "session" and key == "catch_up":
                    value = CatchUpPolicy(value)
                setattr(target, key, value)

        return config

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> 'ApplicationConfig':
        """Load configuration from a JSON file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix != '.json':
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        with open(config_path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_environment(cls) -> 'ApplicationConfig':
        """Create configuration from environment variables"""
        env_name = os.getenv('LIVECOUNTER_ENV', 'development')
        config = cls.for_environment(Environment(env_name))

        if os.getenv('LIVECOUNTER_DEBUG'):
            config.debug = os.getenv('LIVECOUNTER_DEBUG').lower() == 'true'

        if os.getenv('LIVECOUNTER_STORE'):
            config.persistence.backend = os.getenv('LIVECOUNTER_STORE')

        if os.getenv('LIVECOUNTER_DATABASE_URL'):
            config.persistence.url = os.getenv('LIVECOUNTER_DATABASE_URL')

        if os.getenv('LIVECOUNTER_TICK_INTERVAL'):
            config.session.tick_interval = float(os.getenv('LIVECOUNTER_TICK_INTERVAL'))

        if os.getenv('LIVECOUNTER_CATCH_UP'):
            config.session.catch_up = CatchUpPolicy(os.getenv('LIVECOUNTER_CATCH_UP'))

        if os.getenv('LIVECOUNTER_SECRET_KEY'):
            config.web.secret_key = os.getenv('LIVECOUNTER_SECRET_KEY')

        if os.getenv('LIVECOUNTER_HOST'):
            config.web.host = os.getenv('LIVECOUNTER_HOST')

        if os.getenv('LIVECOUNTER_PORT'):
            config.web.port = int(os.getenv('LIVECOUNTER_PORT'))

        if os.getenv('LIVECOUNTER_LOG_LEVEL'):
            config.logging.level = os.getenv('LIVECOUNTER_LOG_LEVEL').upper()

        return config

    def get_secret_key(self) -> str:
        """Return the configured secret key, generating one per process if unset"""
        if not self.web.secret_key:
            self.web.secret_key = secrets.token_hex(32)
        return self.web.secret_key

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "environment": self.environment.value,
            "debug": self.debug,
            "session": {
                "tick_interval": self.session.tick_interval,
                "subscriber_buffer": self.session.subscriber_buffer,
                "catch_up": self.session.catch_up.value,
                "idle_timeout": self.session.idle_timeout,
                "cleanup_interval": self.session.cleanup_interval
            },
            "persistence": {
                "backend": self.persistence.backend,
                "url": self.persistence.url,
                "echo": self.persistence.echo
            },
            "web": {
                "host": self.web.host,
                "port": self.web.port,
                "debug": self.web.debug,
                "secret_key": self.web.secret_key
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "file_path": self.logging.file_path,
                "max_file_size": self.logging.max_file_size,
                "backup_count": self.logging.backup_count
            }
        }


# Global configuration management
_current_config: Optional[ApplicationConfig] = None


def set_config(config: ApplicationConfig):
    """Set the global configuration"""
    global _current_config
    _current_config = config


def get_config() -> ApplicationConfig:
    """Get the current global configuration"""
    global _current_config

    if _current_config is None:
        _current_config = ApplicationConfig.from_environment()

    return _current_config


__all__ = [
    "ApplicationConfig", "Environment", "CatchUpPolicy", "SessionConfig",
    "PersistenceConfig", "WebConfig", "LoggingConfig",
    "set_config", "get_config"
]
