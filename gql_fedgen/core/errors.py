"""Errors raised while building the IR and by generated federation code."""


class GenerationError(Exception):
    """Base class for failures that abort a generation run."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SchemaLoadError(GenerationError):
    """A schema source could not be read, parsed or validated."""

    def __init__(self, message: str, source_name: str | None = None):
        self.source_name = source_name
        if source_name:
            message = f"{source_name}: {message}"
        super().__init__(message)


class ConfigValidationError(GenerationError):
    """The configuration is invalid."""


class AutobindError(GenerationError):
    """An autobind module could not be imported."""


class DirectiveBuildError(GenerationError):
    """A directive is unknown, misplaced or has invalid arguments."""


class TypeBuildError(GenerationError):
    """A schema type could not be bound to a Python type."""


class MissingQueryRootError(GenerationError):
    """The schema has no query root type."""


class UnsupportedKeyError(GenerationError):
    """A @key directive does not name exactly one existing field."""

    def __init__(self, type_name: str, fields: str, reason: str | None = None):
        self.type_name = type_name
        self.fields = fields
        reason = reason or "only single fields are supported in @key declarations"
        super().__init__(f"{type_name}: @key(fields: {fields!r}): {reason}")


class RenderError(GenerationError):
    """A template failed to render or produced invalid Python."""


class FederationError(Exception):
    """Base class for errors raised by generated entity resolvers."""


class EntityTypeMismatchError(FederationError):
    """A representation's key value does not match the entity's key type."""

    def __init__(self, type_name: str, field_name: str, value):
        self.type_name = type_name
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"{type_name}.{field_name}: unexpected key value {value!r}"
        )


class UnknownEntityTypeError(FederationError):
    """A representation's __typename matches no known entity."""

    def __init__(self, type_name):
        self.type_name = type_name
        super().__init__(f"unknown type: {type_name!r}")


class IntrospectionDisabledError(FederationError):
    """The _service resolver was called while introspection is disabled."""
