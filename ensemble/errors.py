from __future__ import annotations


class EngineError(Exception):
    """Base class for failures the service turns into error responses."""

    kind = "engine_error"


class NotFoundError(EngineError):
    kind = "not_found"


class UpstreamUnavailableError(EngineError):
    kind = "upstream_unavailable"


class MalformedInputError(EngineError, ValueError):
    kind = "malformed_input"


class CatalogMismatchError(EngineError, LookupError):
    """A rule or chat request needs a fixture kind the active catalog does not list."""

    kind = "catalog_mismatch"
