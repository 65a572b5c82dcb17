"""MongoDB connection helpers with an explicit liveness check.

Settings are passed in rather than read from module globals, and startup
failures surface as :class:`DatabaseStartupError` so callers decide whether
to exit.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional
from urllib.parse import quote

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = (
    "MONGODB_CLUSTER_ADDRESS",
    "MONGODB_USERNAME",
    "MONGODB_PASSWORD",
    "MONGODB_DB_NAME",
)


class DatabaseStartupErrorReason(str, Enum):
    """Why a database connection could not be established."""

    MISSING_CONFIGURATION = "missing-configuration"
    CONNECTION_FAILED = "connection-failed"


class DatabaseStartupError(RuntimeError):
    """Raised when the database cannot be reached at startup."""

    def __init__(self, reason: DatabaseStartupErrorReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class DatabaseSettings(BaseSettings):
    """Connection settings read from ``MONGODB_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MONGODB_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    cluster_address: str = Field(default="", description="e.g. cluster0.x.mongodb.net")
    username: str = ""
    password: str = ""
    db_name: str = ""
    server_selection_timeout_ms: int = 15000

    @field_validator("cluster_address", "db_name", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @classmethod
    def from_env(cls) -> "DatabaseSettings":
        return cls()

    def missing_fields(self) -> List[str]:
        values = (self.cluster_address, self.username, self.password, self.db_name)
        return [name for name, value in zip(REQUIRED_ENV_VARS, values) if not value]

    def uri(self) -> str:
        user = quote(self.username, safe="")
        password = quote(self.password, safe="")
        return f"mongodb+srv://{user}:{password}@{self.cluster_address}/?retryWrites=true&w=majority"


@dataclass
class DatabaseHandle:
    """A live client together with the selected database."""

    client: MongoClient
    database: Database
    ping_ms: float

    @property
    def name(self) -> str:
        return self.database.name

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "DatabaseHandle":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _require_configuration(settings: DatabaseSettings) -> None:
    missing = settings.missing_fields()
    if missing:
        logger.error("Missing one of: %s", " / ".join(REQUIRED_ENV_VARS))
        raise DatabaseStartupError(
            DatabaseStartupErrorReason.MISSING_CONFIGURATION,
            f"Missing database configuration: {', '.join(missing)}",
        )


def _open_and_ping(settings: DatabaseSettings) -> tuple[MongoClient, float]:
    logger.info("Trying to connect to db")
    client: Optional[MongoClient] = None
    try:
        client = MongoClient(
            settings.uri(),
            serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
        )
        started = time.perf_counter()
        client.admin.command("ping")
        ping_ms = (time.perf_counter() - started) * 1000
    except PyMongoError as exc:
        if client is not None:
            client.close()
        logger.error("Connection failed: %s", exc)
        raise DatabaseStartupError(
            DatabaseStartupErrorReason.CONNECTION_FAILED,
            f"Connection failed: {exc}",
        ) from exc

    logger.info("Connected successfully to server")
    return client, ping_ms


def connect(settings: DatabaseSettings) -> DatabaseHandle:
    """Connect, run a ``ping`` liveness check and return a live handle.

    The database is only selected after the ping succeeds; the caller owns
    the returned handle and must close it.

    Raises:
        DatabaseStartupError: if configuration is missing or the cluster
            cannot be reached.
    """

    _require_configuration(settings)
    client, ping_ms = _open_and_ping(settings)
    return DatabaseHandle(client=client, database=client[settings.db_name], ping_ms=ping_ms)


def ping_once(settings: DatabaseSettings) -> float:
    """Connect, ping and close again. Returns the ping round trip in milliseconds."""

    _require_configuration(settings)
    client, ping_ms = _open_and_ping(settings)
    try:
        return ping_ms
    finally:
        client.close()
