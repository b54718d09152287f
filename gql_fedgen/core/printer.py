"""Canonical SDL printer.

Prints a schema graph with types and directive definitions sorted by name
and applied directives preserved, so the output is stable from run to run.
Introspection-only fields (names starting with ``__``) are never printed.
"""

from collections.abc import Collection

from graphql import (
    GraphQLDirective,
    GraphQLNamedType,
    GraphQLSchema,
    ast_from_value,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_introspection_type,
    is_object_type,
    is_scalar_type,
    is_specified_directive,
    is_specified_scalar_type,
    is_union_type,
    print_ast,
)
from graphql.language.block_string import print_block_string
from graphql.pyutils import Undefined


def directive_nodes(definition) -> list:
    """Directive applications on a definition's AST node and its extensions."""
    nodes = [getattr(definition, "ast_node", None), *(getattr(definition, "extension_ast_nodes", None) or ())]
    return [d for node in nodes if node is not None for d in (node.directives or ())]


def print_schema(
    schema: GraphQLSchema,
    hidden_fields: Collection[tuple[str, str]] = (),
    hidden_types: Collection[str] = (),
) -> str:
    """Print ``schema`` as canonical SDL.

    Args:
        schema: The schema graph to print
        hidden_fields: (type name, field name) pairs left out of the output
        hidden_types: Names of types left out of the output
    """
    hidden = set(hidden_fields)
    skipped = set(hidden_types)
    parts = []

    schema_definition = _print_schema_definition(schema)
    if schema_definition:
        parts.append(schema_definition)

    for directive in sorted(schema.directives, key=lambda d: d.name):
        if not is_specified_directive(directive):
            parts.append(_print_directive(directive))

    for name in sorted(schema.type_map):
        type_def = schema.type_map[name]
        if is_introspection_type(type_def) or is_specified_scalar_type(type_def) or name in skipped:
            continue
        parts.append(_print_type(type_def, hidden))

    return "\n\n".join(parts) + "\n"


def _print_schema_definition(schema: GraphQLSchema) -> str:
    roots = [
        ("query", schema.query_type, "Query"),
        ("mutation", schema.mutation_type, "Mutation"),
        ("subscription", schema.subscription_type, "Subscription"),
    ]
    if all(root is None or root.name == default for _, root, default in roots):
        return ""
    lines = [f"  {op}: {root.name}" for op, root, _ in roots if root is not None]
    return "schema {\n" + "\n".join(lines) + "\n}"


def _description(description: str | None, indent: str = "") -> str:
    if not description:
        return ""
    block = print_block_string(description)
    return "\n".join(indent + line if line else line for line in block.split("\n")) + "\n"


def _applied(definition) -> str:
    nodes = directive_nodes(definition)
    if not nodes:
        return ""
    return " " + " ".join(print_ast(node) for node in nodes)


def _default(value_def) -> str:
    ast_node = getattr(value_def, "ast_node", None)
    if ast_node is not None and ast_node.default_value is not None:
        return " = " + print_ast(ast_node.default_value)
    if value_def.default_value is not Undefined:
        value_ast = ast_from_value(value_def.default_value, value_def.type)
        if value_ast is not None:
            return " = " + print_ast(value_ast)
    return ""


def _print_input_value(name: str, value_def) -> str:
    return f"{name}: {value_def.type}{_default(value_def)}{_applied(value_def)}"


def _print_args(args: dict, indent: str = "") -> str:
    if not args:
        return ""
    if not any(arg.description for arg in args.values()):
        return "(" + ", ".join(_print_input_value(name, arg) for name, arg in args.items()) + ")"
    inner = indent + "  "
    lines = [
        _description(arg.description, inner) + inner + _print_input_value(name, arg)
        for name, arg in args.items()
    ]
    return "(\n" + "\n".join(lines) + "\n" + indent + ")"


def _print_directive(directive: GraphQLDirective) -> str:
    locations = " | ".join(location.name for location in directive.locations)
    repeatable = " repeatable" if directive.is_repeatable else ""
    return (
        _description(directive.description)
        + f"directive @{directive.name}{_print_args(directive.args)}{repeatable} on {locations}"
    )


def _print_block(lines: list[str]) -> str:
    if not lines:
        return ""
    return " {\n" + "\n".join(lines) + "\n}"


def _print_fields(type_def: GraphQLNamedType, hidden: set[tuple[str, str]]) -> str:
    lines = []
    for name, field in type_def.fields.items():
        if name.startswith("__") or (type_def.name, name) in hidden:
            continue
        lines.append(
            _description(field.description, "  ")
            + f"  {name}{_print_args(field.args, '  ')}: {field.type}{_applied(field)}"
        )
    return _print_block(lines)


def _print_type(type_def: GraphQLNamedType, hidden: set[tuple[str, str]]) -> str:
    header = _description(type_def.description)

    if is_scalar_type(type_def):
        return header + f"scalar {type_def.name}{_applied(type_def)}"

    if is_object_type(type_def) or is_interface_type(type_def):
        keyword = "type" if is_object_type(type_def) else "interface"
        interfaces = ""
        if type_def.interfaces:
            interfaces = " implements " + " & ".join(i.name for i in type_def.interfaces)
        return (
            header
            + f"{keyword} {type_def.name}{interfaces}{_applied(type_def)}"
            + _print_fields(type_def, hidden)
        )

    if is_union_type(type_def):
        members = ""
        if type_def.types:
            members = " = " + " | ".join(t.name for t in type_def.types)
        return header + f"union {type_def.name}{_applied(type_def)}{members}"

    if is_enum_type(type_def):
        lines = [
            _description(value.description, "  ") + f"  {name}{_applied(value)}"
            for name, value in type_def.values.items()
        ]
        return header + f"enum {type_def.name}{_applied(type_def)}" + _print_block(lines)

    if is_input_object_type(type_def):
        lines = [
            _description(field.description, "  ") + "  " + _print_input_value(name, field)
            for name, field in type_def.fields.items()
        ]
        return header + f"input {type_def.name}{_applied(type_def)}" + _print_block(lines)

    raise TypeError(f"unexpected type definition: {type_def!r}")
