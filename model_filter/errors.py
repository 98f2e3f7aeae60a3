# model_filter/errors.py
from flask import jsonify, request

# Setup-time faults (InvalidConfiguration) and resolution-time faults
# (UnknownMapping, UnknownField) are both server-side bugs, never bad user input.
# Malformed request values degrade to fewer constraints instead of raising.


class ModelFilterError(Exception):
    """Base class for every error raised by model_filter."""


class InvalidConfiguration(ModelFilterError, ValueError):
    """A configuration setter received an argument of the wrong shape."""


class ConfigurationSealed(InvalidConfiguration):
    """A configuration value was written after it was read or sealed."""


class UnknownMapping(ModelFilterError, LookupError):
    """A field mapping names a resolver the entity does not provide."""

    def __init__(self, field: str, mapping: str, entity=None):
        self.field = field
        self.mapping = mapping
        self.entity = entity
        owner = getattr(entity, "__name__", None) or repr(entity)
        super().__init__(f"No filter resolver {mapping!r} on {owner} for field {field!r}")


class UnknownField(ModelFilterError, LookupError):
    """A field reached predicate emission but the entity has no such column."""

    def __init__(self, field: str, entity=None):
        self.field = field
        self.entity = entity
        owner = getattr(entity, "__name__", None) or getattr(entity, "name", None) or repr(entity)
        super().__init__(f"{owner} has no column {field!r}")


def register_error_handlers(app):
    @app.errorhandler(ModelFilterError)
    def handle_model_filter(e: ModelFilterError):
        app.logger.error("model_filter error on %s %s", request.method, request.path, exc_info=e)
        payload = {
            "ok": False,
            "error": type(e).__name__,
            "description": str(e),
            "path": request.path,
            "method": request.method,
        }
        resp = jsonify(payload)
        resp.status_code = 500
        return resp

    return app


__all__ = [
    "ModelFilterError",
    "InvalidConfiguration",
    "ConfigurationSealed",
    "UnknownMapping",
    "UnknownField",
    "register_error_handlers",
]
