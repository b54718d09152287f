"""Custom scalar bindings for GraphQL code generation.

Provides a protocol for declaring which Python type a GraphQL custom scalar
maps to, and a registry the type binder consults for scalars that have no
explicit binding in the config.

Example usage:
    from gql_fedgen.core.scalars import ScalarHandler, ScalarRegistry

    class MoneyHandler:
        python_type = "Decimal"
        module = "decimal"

    registry = ScalarRegistry()
    registry.register("Money", MoneyHandler())
"""

from typing import Protocol, runtime_checkable

from .ir import TypeDescriptor


@runtime_checkable
class ScalarHandler(Protocol):
    """Protocol for custom scalar handlers.

    Attributes:
        python_type: The Python type name (e.g., "datetime", "Decimal")
        module: The module to import it from, or None for builtins
    """

    python_type: str
    module: str | None


class DateTimeHandler:
    """DateTime scalars as ISO 8601 datetimes."""

    python_type = "datetime"
    module = "datetime"


class DateHandler:
    """Date scalars as ISO 8601 dates."""

    python_type = "date"
    module = "datetime"


class UUIDHandler:
    python_type = "UUID"
    module = "uuid"


class JSONHandler:
    """JSON scalars are passed through untyped."""

    python_type = "Any"
    module = "typing"


class ScalarRegistry:
    """Registry for custom scalar handlers.

    Example:
        registry = ScalarRegistry()
        registry.descriptor("DateTime")  # TypeDescriptor(name="datetime", module="datetime")
    """

    def __init__(self):
        self._handlers: dict[str, ScalarHandler] = {}
        self._register_defaults()

    def _register_defaults(self):
        self.register("DateTime", DateTimeHandler())
        self.register("Date", DateHandler())
        self.register("UUID", UUIDHandler())
        self.register("JSON", JSONHandler())
        self.register("JSONObject", JSONHandler())

    def register(self, scalar_name: str, handler: ScalarHandler):
        """Register a handler for a scalar type."""
        self._handlers[scalar_name] = handler

    def get(self, scalar_name: str) -> ScalarHandler | None:
        return self._handlers.get(scalar_name)

    def has(self, scalar_name: str) -> bool:
        return scalar_name in self._handlers

    def descriptor(self, scalar_name: str) -> TypeDescriptor | None:
        """Return the Python type for a scalar, or None if it has no handler."""
        handler = self._handlers.get(scalar_name)
        if handler is None:
            return None
        module = handler.module if handler.module != "builtins" else None
        return TypeDescriptor(name=handler.python_type, module=module)
