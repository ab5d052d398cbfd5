"""Tests for ``migrator.core.connection`` — connection string parsing."""

from __future__ import annotations

import pytest

from migrator.core.connection import ConnectionDescriptor, parse_connection_string
from migrator.core.errors import (
    ConnectionStringError,
    ErrorCategory,
    MalformedConnectionStringError,
    UnsupportedDriverError,
)


class TestParseValid:
    def test_all_fields(self):
        d = parse_connection_string("postgres:db.example.com:5433:main:imqs:secret")
        assert d.driver == "postgres"
        assert d.host == "db.example.com"
        assert d.port == "5433"
        assert d.database == "main"
        assert d.user == "imqs"
        assert d.password == "secret"

    def test_round_trips_to_boundary_format(self):
        text = "postgres:localhost::legacydb:unit_test_user:"
        assert parse_connection_string(text).to_connection_string() == text

    def test_trailing_newline_from_config_service_is_ignored(self):
        d = parse_connection_string("postgres:localhost:5432:main:imqs:pw\n")
        assert d.password == "pw"

    def test_identity_is_host_and_database(self):
        d = parse_connection_string("postgres:localhost:5432:main:imqs:secret")
        assert d.identity == "localhost:main"


class TestConnInfo:
    def test_full(self):
        d = parse_connection_string("postgres:localhost:5432:main:imqs:secret")
        assert d.to_conninfo() == (
            "host=localhost dbname=main user=imqs port=5432 password=secret sslmode=disable"
        )

    @pytest.mark.parametrize("port", ["", "0"])
    def test_empty_port_is_omitted(self, port):
        d = parse_connection_string(f"postgres:localhost:{port}:main:imqs:secret")
        assert "port" not in d.to_connect_kwargs()
        assert "port=" not in d.to_conninfo()

    def test_empty_password_is_omitted(self):
        d = parse_connection_string("postgres:localhost:5432:main:imqs:")
        assert "password" not in d.to_connect_kwargs()
        assert "password=" not in d.to_conninfo()

    def test_sslmode_defaults_to_disable(self):
        d = parse_connection_string("postgres:localhost:5432:main:imqs:secret")
        assert d.to_connect_kwargs()["sslmode"] == "disable"

    def test_sslmode_override(self):
        d = parse_connection_string("postgres:localhost:5432:main:imqs:secret", sslmode="require")
        assert d.to_connect_kwargs()["sslmode"] == "require"

    def test_for_database_keeps_credentials(self):
        d = parse_connection_string("postgres:localhost:5432:main:imqs:secret")
        admin = d.for_database("postgres")
        assert admin.database == "postgres"
        assert admin.user == "imqs"
        assert admin.password == "secret"
        assert d.database == "main"

    def test_repr_hides_password(self):
        d = ConnectionDescriptor("postgres", "localhost", "", "main", "imqs", "hunter2")
        assert "hunter2" not in repr(d)


class TestParseInvalid:
    @pytest.mark.parametrize(
        "text, count",
        [
            ("", 1),
            ("postgres:localhost:5432:main:imqs", 5),
            ("postgres:localhost:5432:main:imqs:pa:ss", 7),
        ],
    )
    def test_wrong_field_count(self, text, count):
        with pytest.raises(MalformedConnectionStringError) as exc_info:
            parse_connection_string(text)
        assert exc_info.value.field_count == count
        assert f"got {count} parts" in str(exc_info.value)

    @pytest.mark.parametrize("driver", ["mysql", "postgresql", "Postgres", ""])
    def test_unsupported_driver(self, driver):
        with pytest.raises(UnsupportedDriverError) as exc_info:
            parse_connection_string(f"{driver}:localhost:5432:main:imqs:secret")
        assert exc_info.value.driver == driver

    def test_errors_are_config_category(self):
        with pytest.raises(ConnectionStringError) as exc_info:
            parse_connection_string("mysql:a:b:c:d:e")
        assert exc_info.value.category is ErrorCategory.CONFIG
