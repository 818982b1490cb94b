"""
Settings Module
Environment-driven configuration for the valuator: API endpoints and keys,
cache location, HTTP timeout and default history window.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


@dataclass(frozen=True)
class APIConfig:
    """Configuration for one external data source"""
    name: str
    rate_limit_per_minute: int
    rate_limit_per_day: int
    base_url: str
    api_key: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    """Valuator configuration resolved from the environment"""
    world_bank: APIConfig
    alpha_vantage: APIConfig
    cache_path: str = "cache/cached_data.db"
    http_timeout: float = 30.0
    years_of_history: int = 5
    log_level: str = "INFO"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def load_settings() -> Settings:
    """Build Settings from environment variables (and .env, already loaded)"""
    world_bank = APIConfig(
        name='worldbank',
        rate_limit_per_minute=_env_int('WORLD_BANK_RATE_PER_MINUTE', 60),
        rate_limit_per_day=_env_int('WORLD_BANK_RATE_PER_DAY', 10000),
        base_url=os.getenv('WORLD_BANK_URL', 'https://api.worldbank.org/v2/country'),
    )
    alpha_vantage = APIConfig(
        name='alphavantage',
        rate_limit_per_minute=_env_int('ALPHA_VANTAGE_RATE_PER_MINUTE', 5),
        rate_limit_per_day=_env_int('ALPHA_VANTAGE_RATE_PER_DAY', 25),
        base_url=os.getenv('ALPHA_VANTAGE_URL', 'https://www.alphavantage.co/query'),
        api_key=os.getenv('ALPHA_VANTAGE_API_KEY', 'demo'),
    )
    return Settings(
        world_bank=world_bank,
        alpha_vantage=alpha_vantage,
        cache_path=os.getenv('VALUATOR_CACHE_PATH', 'cache/cached_data.db'),
        http_timeout=_env_float('VALUATOR_HTTP_TIMEOUT', 30.0),
        years_of_history=_env_int('VALUATOR_YEARS_OF_HISTORY', 5),
        log_level=os.getenv('VALUATOR_LOG_LEVEL', 'INFO').upper(),
    )


def configure_logging(level: str = "INFO"):
    """Configure root logging the same way for every entry point"""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
