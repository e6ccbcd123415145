"""Prompt templates rendered with a sandboxed, lookup-only Jinja2 environment.

Templates may only read fields, loop, branch and apply a handful of
formatting filters::

    Name: {{ currentUser.name }}
    Courses: {% for c in currentUser.courses %}{{ c }}{% if not loop.last %}, {% endif %}{% endfor %}.
    {% if notes is defined %}Notes: {{ notes }}{% else %}No notes.{% endif %}
    Major: {{ currentUser.major | default("Undeclared") }}

Calls, assignments, macros, includes and imports are rejected when the
template is compiled.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from jinja2 import StrictUndefined, TemplateSyntaxError, UndefinedError, nodes
from jinja2.sandbox import SandboxedEnvironment, SecurityError

ALLOWED_FILTERS = frozenset(
    {"default", "join", "length", "lower", "upper", "trim", "tojson", "first", "last"}
)
ALLOWED_TESTS = frozenset({"defined", "undefined", "none", "string", "number", "sequence", "mapping"})

_ALLOWED_NODES = (
    nodes.Output,
    nodes.TemplateData,
    nodes.Name,
    nodes.Getattr,
    nodes.Getitem,
    nodes.Const,
    nodes.For,
    nodes.If,
    nodes.Not,
    nodes.And,
    nodes.Or,
    nodes.Compare,
    nodes.Operand,
    nodes.CondExpr,
    nodes.Concat,
    nodes.Filter,
    nodes.Test,
)


class TemplateError(ValueError):
    """Raised when a template is not allowed or cannot be rendered."""

    def __init__(self, message: str, template_name: Optional[str] = None):
        self.template_name = template_name
        prefix = f"[{template_name}] " if template_name else ""
        super().__init__(f"{prefix}{message}")


def _make_environment() -> SandboxedEnvironment:
    return SandboxedEnvironment(
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )


_ENV = _make_environment()


def _check_nodes(tree: nodes.Template, name: Optional[str]) -> None:
    for node in tree.find_all(nodes.Node):
        if not isinstance(node, _ALLOWED_NODES):
            raise TemplateError(f"'{type(node).__name__}' is not allowed in prompt templates", name)
        if isinstance(node, nodes.Filter) and node.name not in ALLOWED_FILTERS:
            raise TemplateError(f"filter '{node.name}' is not allowed", name)
        if isinstance(node, nodes.Test) and node.name not in ALLOWED_TESTS:
            raise TemplateError(f"test '{node.name}' is not allowed", name)


class PromptTemplate:
    """A compiled instruction template.

    Args:
        source: Template text.
        name: Optional label used in error messages and logs.
    """

    def __init__(self, source: str, name: Optional[str] = None):
        self.source = source
        self.name = name
        try:
            tree = _ENV.parse(source)
        except TemplateSyntaxError as exc:
            raise TemplateError(f"syntax error on line {exc.lineno}: {exc.message}", name) from exc
        _check_nodes(tree, name)
        self._template = _ENV.from_string(source)

    def render(self, context: Optional[Mapping[str, Any]] = None) -> str:
        try:
            return self._template.render(dict(context or {}))
        except (UndefinedError, SecurityError) as exc:
            raise TemplateError(str(exc), self.name) from exc

    def __repr__(self) -> str:
        return f"PromptTemplate(name={self.name!r})"


def render_template(source: str, context: Optional[Mapping[str, Any]] = None) -> str:
    """Compile and render ``source`` in one step."""
    return PromptTemplate(source).render(context)
