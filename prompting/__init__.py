"""Prompt template rendering."""
from .template import PromptTemplate, TemplateError, render_template

__all__ = ["PromptTemplate", "TemplateError", "render_template"]
