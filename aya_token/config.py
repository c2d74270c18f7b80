"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class AyaConfig(BaseSettings):
    """AYA token ledger configuration"""

    # Genesis configuration
    token_name: str = "AYA"
    token_symbol: str = "AYA"
    token_decimals: int = 18
    initial_supply: int = 1_000_000_000 * 10 ** 18
    owner_address: str = "0x00000000000000000000000000000000000000a1"
    treasury_address: Optional[str] = None  # If None, the owner is the treasury

    # Business rules configuration
    allow_empty_batches: bool = True

    # Storage configuration
    storage_backend: str = "sqlite"  # sqlite or memory
    database_path: str = "aya_token.db"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Feature flags
    enable_audit_logging: bool = True

    class Config:
        env_prefix = "AYA_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = AyaConfig()


def get_config() -> AyaConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> AyaConfig:
    """Reload configuration from environment"""
    global config
    config = AyaConfig()
    return config
