"""Template renderer for generated Python modules.

Renders Jinja2 templates into files. Templates declare the imports they
need with ``reserve_import``; imports are collected per output file so that
several templates rendered into the same file share one import block.

Supports custom templates via the template_dir parameter:
    renderer = Renderer(template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import ast
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Set

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, TemplateError, select_autoescape

from .errors import RenderError

logger = logging.getLogger(__name__)

GENERATED_HEADER = "# Code generated by gql-fedgen, DO NOT EDIT."


def snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def safe_docstring(text: str) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


def safe_comment(text: str) -> str:
    """Make text safe for a single-line Python comment."""
    if not text:
        return ""
    text = text.replace("\n", " ").replace("\r", "")
    text = text.replace("**", "").replace("*", "")
    text = re.sub(r"\s+", " ", text)
    if len(text) > 120:
        text = text[:117] + "..."
    return text.strip()


# Python reserved keywords that cannot be used as parameter names
PYTHON_KEYWORDS = {
    "False", "None", "True", "and", "as", "assert", "async", "await",
    "break", "class", "continue", "def", "del", "elif", "else", "except",
    "finally", "for", "from", "global", "if", "import", "in", "is",
    "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try",
    "while", "with", "yield",
}


def safe_param_name(name: str) -> str:
    """Make a parameter name safe for Python by suffixing keywords with underscore."""
    if name in PYTHON_KEYWORDS:
        return f"{name}_"
    return name


class Imports:
    """Imports reserved for one generated file."""

    def __init__(self):
        self.modules: Set[str] = set()
        self.names: Dict[str, Set[str]] = {}

    def reserve(self, module: str, *names: str) -> str:
        """Reserve ``import module`` or ``from module import names``.

        Returns an empty string so templates can call it inline.
        """
        if not module or module == "builtins":
            return ""
        if names:
            self.names.setdefault(module, set()).update(names)
        else:
            self.modules.add(module)
        return ""

    def render(self) -> str:
        future = []
        if "__future__" in self.names:
            future.append(f"from __future__ import {', '.join(sorted(self.names['__future__']))}")
        plain = [f"import {module}" for module in sorted(self.modules)]
        from_imports = [
            f"from {module} import {', '.join(sorted(names))}"
            for module, names in sorted(self.names.items())
            if module != "__future__"
        ]
        blocks = [block for block in (future, plain + from_imports) if block]
        return "\n\n".join("\n".join(block) for block in blocks)


@dataclass
class _OutputFile:
    imports: Imports = field(default_factory=Imports)
    bodies: list[str] = field(default_factory=list)


class Renderer:
    """Renders templates into generated files.

    Supports custom templates via the template_dir parameter.
    Templates in template_dir take precedence over built-in templates.

    Available templates to override:
        - service.py.j2: federation entity dispatch
        - models.py.j2: pydantic models and enums
    """

    def __init__(self, template_dir: Optional[str] = None, header: str = GENERATED_HEADER):
        """Initialize the renderer.

        Args:
            template_dir: Optional directory with custom Jinja2 templates.
                          Templates here override the built-in templates.
            header: Comment written at the top of every generated file
        """
        self.template_dir = template_dir
        self.header = header
        self._files: Dict[str, _OutputFile] = {}

        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_fedgen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["snake_case"] = snake_case
        self.env.filters["repr"] = repr
        self.env.filters["safe_docstring"] = safe_docstring
        self.env.filters["safe_comment"] = safe_comment
        self.env.filters["safe_param"] = safe_param_name

    def render(
        self,
        template: str,
        package_name: str,
        filename: str | os.PathLike,
        data: Dict[str, Any],
        generated_header: bool = True,
    ) -> str:
        """Render ``template`` into ``filename`` and return the file content.

        Rendering into a file that was already rendered in this run appends
        the new body and merges its imports.

        Raises:
            RenderError: if the template fails, the output is not valid
                Python, or the file cannot be written
        """
        key = os.fspath(filename)
        output = self._files.setdefault(key, _OutputFile())

        try:
            body = self.env.get_template(template).render(
                data,
                package_name=package_name,
                reserve_import=output.imports.reserve,
            )
        except TemplateError as e:
            raise RenderError(f"{template}: {e}") from e
        output.bodies.append(body.strip("\n"))

        parts = []
        if generated_header and self.header:
            parts.append(self.header.rstrip("\n"))
        imports = output.imports.render()
        if imports:
            parts.append(imports)
        content = "\n\n".join(parts)
        if content:
            content += "\n\n\n"
        content += "\n\n\n".join(b for b in output.bodies if b) + "\n"

        if key.endswith(".py"):
            try:
                ast.parse(content)
            except SyntaxError as e:
                raise RenderError(f"Generated invalid Python for {key}: {e}\nTemplate: {template}") from e

        path = Path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise RenderError(f"unable to write {key}: {e.strerror or e}") from e

        logger.debug("Rendered %s into %s (%d bytes)", template, key, len(content))
        return content
