"""
Central configuration for the etherscan-indexer project.
All settings can be overridden via environment variables.
See project root .env.example for a full list of variables.
"""
import os
from dataclasses import dataclass, replace

# ---------------------------------------------------------------------------
# Etherscan proxy API
# ---------------------------------------------------------------------------
API_SERVER = os.getenv("API_SERVER", "https://api.etherscan.io/api")
API_KEY = os.getenv("API_KEY", "")
# Seconds before an API request is abandoned (counts as a failed fetch)
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))

# ---------------------------------------------------------------------------
# Database (PostgreSQL)
# ---------------------------------------------------------------------------
DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
DB_PORT = int(os.getenv("DB_PORT", "5432"))
DB_NAME = os.getenv("DB_NAME", "postgres")
DB_USER = os.getenv("DB_USER", "indexer")
DB_PASS = os.getenv("DB_PASS", "password")
# libpq DSN handed to every store call; takes precedence over the DB_* parts
CONNECTION_STRING = os.getenv(
    "CONNECTION_STRING",
    f"host={DB_HOST} port={DB_PORT} dbname={DB_NAME} user={DB_USER} password={DB_PASS}",
)

# ---------------------------------------------------------------------------
# Indexer tuning
# ---------------------------------------------------------------------------
# First block number of every sweep
INDEX_START = int(os.getenv("INDEX_START", "0"))
# Blocks per sweep
BLOCK_TO_PROCESS = int(os.getenv("BLOCK_TO_PROCESS", "10"))
# Seconds to wait between sweeps
GRACE_PERIOD = float(os.getenv("GRACE_PERIOD", "10.0"))

# ---------------------------------------------------------------------------
# Logging / read API
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE") or None
API_PORT = int(os.getenv("API_PORT", "8000"))


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    connection_string: str
    grace_period: float
    index_start: int
    block_to_process: int
    api_key: str
    api_server: str
    http_timeout: float = 30.0

    def validate(self) -> "Settings":
        if not self.connection_string:
            raise ConfigError("CONNECTION_STRING must not be empty")
        if not self.api_server:
            raise ConfigError("API_SERVER must not be empty")
        if self.index_start < 0:
            raise ConfigError(f"INDEX_START must be >= 0, got {self.index_start}")
        if self.block_to_process < 0:
            raise ConfigError(f"BLOCK_TO_PROCESS must be >= 0, got {self.block_to_process}")
        if self.grace_period < 0:
            raise ConfigError(f"GRACE_PERIOD must be >= 0, got {self.grace_period}")
        if self.http_timeout <= 0:
            raise ConfigError(f"HTTP_TIMEOUT must be > 0, got {self.http_timeout}")
        return self


def load_settings(**overrides) -> Settings:
    """
    Build validated Settings from the module-level values.
    Keyword overrides (e.g. from the CLI) replace individual fields; None values are ignored.
    """
    settings = Settings(
        connection_string=CONNECTION_STRING,
        grace_period=GRACE_PERIOD,
        index_start=INDEX_START,
        block_to_process=BLOCK_TO_PROCESS,
        api_key=API_KEY,
        api_server=API_SERVER,
        http_timeout=HTTP_TIMEOUT,
    )
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        settings = replace(settings, **overrides)
    return settings.validate()
