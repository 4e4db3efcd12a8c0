import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Union

import yaml

from ..common.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ServerDefaults:
    """Default values and limits for the Guirlande server"""

    # Environments
    DEVELOPMENT: ClassVar[str] = "development"
    PRODUCTION: ClassVar[str] = "production"

    # Network Defaults
    DEFAULT_HOST: ClassVar[str] = "0.0.0.0"
    DEFAULT_PORT: ClassVar[int] = 8080

    # Module Defaults
    DEFAULT_DELETE_INVALIDATED_TIMEOUT_S: ClassVar[int] = 600
    DEFAULT_TOKEN_LENGTH: ClassVar[int] = 32

    # Guirlande Defaults
    DEFAULT_CODE_LENGTH: ClassVar[int] = 6
    DEFAULT_ROTATION_INTERVAL_S: ClassVar[float] = 300.0
    DEFAULT_CROSSFADE_SPEED_S: ClassVar[float] = 0.01
    DEFAULT_CROSSFADE_DURATION: ClassVar[float] = 1.0
    DEFAULT_PRESET_PAUSE_S: ClassVar[float] = 1.0
    DEFAULT_RED_PIN: ClassVar[int] = 17
    DEFAULT_GREEN_PIN: ClassVar[int] = 27
    DEFAULT_BLUE_PIN: ClassVar[int] = 22
    DEFAULT_PWM_FREQUENCY_HZ: ClassVar[int] = 100

    # Storage Defaults
    DEFAULT_DATA_DIR: ClassVar[str] = "data"

    # Environment variables
    CONFIG_ENV_VAR: ClassVar[str] = "GUIRLANDE_CONFIG"
    ENVIRONMENT_ENV_VAR: ClassVar[str] = "GUIRLANDE_ENV"


@dataclass
class NetworkConfig:
    """HTTP listener settings"""

    host: str = ServerDefaults.DEFAULT_HOST
    port: int = ServerDefaults.DEFAULT_PORT
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    def validate(self) -> None:
        if not 1 <= self.port <= 65535:
            raise ConfigurationError("Port must be between 1 and 65535", "network.port")


@dataclass
class ModulesConfig:
    """Module lifecycle settings"""

    # Seconds an unvalidated module may live before it is deleted
    delete_invalidated_timeout: float = (
        ServerDefaults.DEFAULT_DELETE_INVALIDATED_TIMEOUT_S
    )
    token_length: int = ServerDefaults.DEFAULT_TOKEN_LENGTH

    def validate(self) -> None:
        if self.delete_invalidated_timeout <= 0:
            raise ConfigurationError(
                "Invalidated module timeout must be positive",
                "modules.delete_invalidated_timeout",
            )
        if not 16 <= self.token_length <= 256:
            raise ConfigurationError(
                "Token length must be between 16 and 256", "modules.token_length"
            )


@dataclass
class GuirlandeConfig:
    """Ambient light settings (presets, access code, output pins)"""

    code_length: int = ServerDefaults.DEFAULT_CODE_LENGTH
    rotation_interval: float = ServerDefaults.DEFAULT_ROTATION_INTERVAL_S
    crossfade_speed: float = ServerDefaults.DEFAULT_CROSSFADE_SPEED_S
    crossfade_duration: float = ServerDefaults.DEFAULT_CROSSFADE_DURATION
    preset_pause: float = ServerDefaults.DEFAULT_PRESET_PAUSE_S

    # Output
    output: str = "mock"
    red_pin: int = ServerDefaults.DEFAULT_RED_PIN
    green_pin: int = ServerDefaults.DEFAULT_GREEN_PIN
    blue_pin: int = ServerDefaults.DEFAULT_BLUE_PIN
    pwm_frequency: int = ServerDefaults.DEFAULT_PWM_FREQUENCY_HZ

    OUTPUTS: ClassVar[tuple] = ("mock", "gpio")

    @property
    def pins(self) -> tuple:
        return (self.red_pin, self.green_pin, self.blue_pin)

    def validate(self) -> None:
        if not 4 <= self.code_length <= 12:
            raise ConfigurationError(
                "Code length must be between 4 and 12", "guirlande.code_length"
            )
        for name in ("rotation_interval", "crossfade_speed", "crossfade_duration"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive", f"guirlande.{name}")
        if self.preset_pause < 0:
            raise ConfigurationError(
                "Preset pause cannot be negative", "guirlande.preset_pause"
            )
        if self.output not in self.OUTPUTS:
            raise ConfigurationError(
                f"Output must be one of {', '.join(self.OUTPUTS)}", "guirlande.output"
            )
        if len(set(self.pins)) != 3:
            raise ConfigurationError("Color pins must be distinct", "guirlande.pins")
        if self.rotation_interval < self.crossfade_duration + self.preset_pause:
            logger.warning(
                f"Rotation interval {self.rotation_interval}s is shorter than the "
                f"preset hand-off, presets may be skipped"
            )


@dataclass
class StorageConfig:
    """Document storage settings"""

    backend: str = "memory"
    data_dir: str = ServerDefaults.DEFAULT_DATA_DIR

    BACKENDS: ClassVar[tuple] = ("memory", "json")

    def validate(self) -> None:
        if self.backend not in self.BACKENDS:
            raise ConfigurationError(
                f"Storage backend must be one of {', '.join(self.BACKENDS)}",
                "storage.backend",
            )


@dataclass
class AuthConfig:
    """Bearer tokens accepted for authenticated endpoints"""

    api_tokens: List[str] = field(default_factory=list)

    def validate(self) -> None:
        if any(not token for token in self.api_tokens):
            raise ConfigurationError("API tokens cannot be empty", "auth.api_tokens")
        if not self.api_tokens:
            logger.warning("No API tokens configured, authenticated endpoints are locked")


@dataclass
class ServerConfig:
    """Main server configuration"""

    environment: str = ServerDefaults.DEVELOPMENT
    random_seed: Optional[int] = None
    network: NetworkConfig = field(default_factory=NetworkConfig)
    modules: ModulesConfig = field(default_factory=ModulesConfig)
    guirlande: GuirlandeConfig = field(default_factory=GuirlandeConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    SECTIONS: ClassVar[Dict[str, type]] = {
        "network": NetworkConfig,
        "modules": ModulesConfig,
        "guirlande": GuirlandeConfig,
        "storage": StorageConfig,
        "auth": AuthConfig,
    }

    def __post_init__(self):
        """Validate entire configuration"""
        try:
            if self.environment not in (
                ServerDefaults.DEVELOPMENT,
                ServerDefaults.PRODUCTION,
            ):
                raise ConfigurationError(
                    f"Unknown environment: {self.environment}", "environment"
                )
            self.network.validate()
            self.modules.validate()
            self.guirlande.validate()
            self.storage.validate()
            self.auth.validate()
        except ConfigurationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    @property
    def is_production(self) -> bool:
        return self.environment == ServerDefaults.PRODUCTION

    @classmethod
    def create_default(cls) -> "ServerConfig":
        """Create default configuration"""
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
        """Create configuration from a plain mapping (e.g. parsed YAML)"""
        kwargs: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            if key in cls.SECTIONS:
                section = cls.SECTIONS[key]
                known = {f.name for f in fields(section)}
                unknown = set(value or {}) - known
                if unknown:
                    raise ConfigurationError(
                        f"Unknown {key} settings: {', '.join(sorted(unknown))}", key
                    )
                kwargs[key] = section(**(value or {}))
            elif key in ("environment", "random_seed"):
                kwargs[key] = value
            else:
                raise ConfigurationError(f"Unknown configuration section: {key}", key)
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ServerConfig":
        """Load configuration from a YAML file"""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read configuration {path}: {e}")
        logger.info(f"Loaded configuration from {path}")
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "ServerConfig":
        """Load configuration from `path`, $GUIRLANDE_CONFIG or defaults.

        $GUIRLANDE_ENV overrides the environment of whichever source is used.
        """
        path = path or os.environ.get(ServerDefaults.CONFIG_ENV_VAR)
        data: Dict[str, Any] = {}
        if path:
            config = cls.from_file(path)
            data = config.to_dict()
        environment = os.environ.get(ServerDefaults.ENVIRONMENT_ENV_VAR)
        if environment:
            data["environment"] = environment
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the mapping accepted by `from_dict`"""
        result: Dict[str, Any] = {
            "environment": self.environment,
            "random_seed": self.random_seed,
        }
        for name in self.SECTIONS:
            section = getattr(self, name)
            result[name] = {f.name: getattr(section, f.name) for f in fields(section)}
        return result
