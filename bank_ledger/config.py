"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class LedgerConfig(BaseSettings):
    """Bank ledger configuration"""

    # Persistence configuration
    data_file: str = "customers.txt"
    field_delimiter: str = ","
    save_mode: str = "append"  # append or rewrite

    # Business rules configuration
    currency: str = "INR"
    daily_transaction_limit: str = "5000.00"
    minimum_initial_deposit: str = "500.00"
    minimum_customer_age: int = 18

    # Manager account (never persisted)
    manager_name: str = "Admin"
    manager_age: int = 45
    manager_contact: str = "admin@bank.com"
    manager_password: str = "admin123"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    class Config:
        env_prefix = "BANK_LEDGER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
