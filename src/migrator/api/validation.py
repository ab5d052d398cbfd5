"""Boundary validation for names taken from URL paths.

Database names end up unquoted in ``CREATE DATABASE`` and schema names end
up in a filesystem path, so both are restricted to ASCII letters, digits,
``_`` and ``-``.
"""

from __future__ import annotations

import re

VALID_NAME = re.compile(r"^[_\-a-zA-Z0-9]+$")


def is_valid_name(name: str) -> bool:
    return VALID_NAME.fullmatch(name) is not None
