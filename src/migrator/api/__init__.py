"""
HTTP service for the migrator.

Upgrades every known database on startup, then serves:

    GET  /ping
    POST /upgrade/{db_name}
    GET  /schema/{name}

There is no authentication: the service is only reachable from inside the
deployment network, the same trust model as the config service.
"""

from migrator.api.app import create_app

__all__ = ["create_app"]
