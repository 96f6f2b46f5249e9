"""Process configuration for the relay node.

Pydantic-based settings. Every field can come from the environment with the
``RELAYNODE_`` prefix, from a ``.env`` file, or from ``relaynode serve``
command line options (which win).

Environment Variables:
- RELAYNODE_DATA_DIR: storage directory for the node engine
- RELAYNODE_RPC_PORT: port the control plane listens on
- RELAYNODE_NODE_SERVICE_PORT: port the node accepts peer connections on
- RELAYNODE_ESPLORA_URL: chain data source
- RELAYNODE_RGS_URL: rapid gossip sync server
- RELAYNODE_NETWORK: bitcoin, testnet, signet or regtest
- RELAYNODE_SEED_HEX: optional 128 hex character seed
"""

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relaynode.domain.enums import Network
from relaynode.domain.value_objects import SeedMaterial, SocketAddress
from relaynode.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Relay node configuration, fixed for the lifetime of the process."""

    model_config = SettingsConfigDict(
        env_prefix="RELAYNODE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Node engine
    data_dir: Path = Field(description="Directory the node engine stores its state in")
    node_service_port: int = Field(
        ge=1, le=65535, description="Port the node listens on for peer connections"
    )
    esplora_url: str = Field(description="Esplora server used for chain data")
    rgs_url: str = Field(description="Rapid gossip sync server URL")
    network: Network = Field(default=Network.TESTNET, description="Bitcoin network")
    seed_hex: str | None = Field(
        default=None,
        repr=False,
        description="64 byte node seed as hex; generated when omitted",
    )

    # Control plane
    rpc_host: str = Field(default="0.0.0.0", description="Control plane bind address")
    rpc_port: int = Field(ge=1, le=65535, description="Control plane HTTP port")
    worker_threads: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Threads running blocking node calls",
    )

    # Logging
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING or ERROR")
    json_logs: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("seed_hex")
    @classmethod
    def _validate_seed_hex(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        # Raises ValueError with a message naming the problem
        SeedMaterial.from_hex(value)
        return value.strip().lower()

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def seed(self) -> SeedMaterial | None:
        """The operator supplied seed, if any."""
        return SeedMaterial.from_hex(self.seed_hex) if self.seed_hex else None

    @property
    def node_service_address(self) -> SocketAddress:
        """Address the node's peer service binds to (all interfaces)."""
        return SocketAddress(host="::", port=self.node_service_port)


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment plus explicit overrides.

    ``None`` overrides are ignored so unset CLI options fall through to the
    environment.

    Raises:
        ConfigurationError: If a setting is missing or invalid
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        first = e.errors()[0]
        setting = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(
            f"Invalid configuration: {setting or 'settings'}: {first.get('msg')}",
            setting=setting or None,
            original_error=e,
        ) from e
