"""Connection descriptors — parse ``driver:host:port:dbname:user:password``.

This is the boundary-facing connection string format used by the CLI, the
config service and the HTTP service. It is deliberately not a URL: exactly
six colon-separated fields, no escaping, so neither the host nor the
password may contain a colon.

Format
------
================  ===================================================
Field             Notes
================  ===================================================
``driver``        Must be ``postgres``
``host``          Hostname or address
``port``          May be empty or ``0``; omitted from the conninfo
``database``      Target database, created if it does not exist
``user``          Role name
``password``      May be empty; omitted from the conninfo
================  ===================================================

Usage
-----
::

    from migrator.core.connection import parse_connection_string

    descriptor = parse_connection_string("postgres:localhost::main:imqs:secret")
    descriptor.to_conninfo()
    # 'host=localhost dbname=main user=imqs password=secret sslmode=disable'
    descriptor.identity
    # 'localhost:main'
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from migrator.core.errors import MalformedConnectionStringError, UnsupportedDriverError

SUPPORTED_DRIVER = "postgres"
DEFAULT_SSLMODE = "disable"
FIELD_COUNT = 6


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Parsed connection string.

    ``port`` is kept as the raw string so that an empty field round-trips
    unchanged.
    """

    driver: str
    host: str
    port: str
    database: str
    user: str
    password: str = ""
    sslmode: str = ""

    @property
    def identity(self) -> str:
        """``host:database`` — safe to log, used in every diagnostic."""
        return f"{self.host}:{self.database}"

    @property
    def has_port(self) -> bool:
        return self.port not in ("", "0")

    @property
    def effective_sslmode(self) -> str:
        return self.sslmode or DEFAULT_SSLMODE

    def for_database(self, database: str) -> ConnectionDescriptor:
        """Same server and credentials, different database."""
        return replace(self, database=database)

    def to_connect_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``psycopg2.connect``."""
        kwargs: dict[str, Any] = {
            "host": self.host,
            "dbname": self.database,
            "user": self.user,
        }
        if self.has_port:
            kwargs["port"] = self.port
        if self.password:
            kwargs["password"] = self.password
        kwargs["sslmode"] = self.effective_sslmode
        return kwargs

    def to_conninfo(self) -> str:
        """libpq keyword/value connection string."""
        return " ".join(f"{key}={value}" for key, value in self.to_connect_kwargs().items())

    def to_connection_string(self) -> str:
        """Render back to the six-field boundary format."""
        return ":".join(
            [self.driver, self.host, self.port, self.database, self.user, self.password]
        )

    def __repr__(self) -> str:
        password = "***" if self.password else ""
        return (
            f"ConnectionDescriptor(driver={self.driver!r}, host={self.host!r}, "
            f"port={self.port!r}, database={self.database!r}, user={self.user!r}, "
            f"password={password!r}, sslmode={self.effective_sslmode!r})"
        )


def parse_connection_string(text: str, *, sslmode: str = "") -> ConnectionDescriptor:
    """Parse ``driver:host:port:dbname:user:password``.

    Raises:
        MalformedConnectionStringError: field count is not 6
        UnsupportedDriverError: driver is not ``postgres``
    """
    parts = text.rstrip("\r\n").split(":")
    if len(parts) != FIELD_COUNT:
        raise MalformedConnectionStringError(len(parts))
    driver, host, port, database, user, password = parts
    if driver != SUPPORTED_DRIVER:
        raise UnsupportedDriverError(driver)
    return ConnectionDescriptor(
        driver=driver,
        host=host,
        port=port,
        database=database,
        user=user,
        password=password,
        sslmode=sslmode,
    )


__all__ = [
    "ConnectionDescriptor",
    "DEFAULT_SSLMODE",
    "SUPPORTED_DRIVER",
    "parse_connection_string",
]
