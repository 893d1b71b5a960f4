"""
Template Rendering

Renders the node setup script and the playlist formats from the Jinja2
templates shipped in icecast_fleet/templates.
"""

from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class TemplateRenderer:
    def __init__(self, templates_dir: Optional[Path] = None):
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, **context: Any) -> str:
        tmpl = self.env.get_template(template_name)
        return tmpl.render(**context)


_default_renderer: Optional[TemplateRenderer] = None


def get_renderer() -> TemplateRenderer:
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = TemplateRenderer()
    return _default_renderer
