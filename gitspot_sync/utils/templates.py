"""Contains utilities for rendering Jinja2 templates."""

from pathlib import Path
from typing import Any

import jinja2
import structlog

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

TEMPLATES_DIRECTORY = Path(__file__).parent.parent / "templates"


def construct_jinja2_environment(autoescape: bool = True) -> jinja2.Environment:
    """Construct a Jinja2 environment.

    Autoescaping is on by default because rendered output is HTML consumed by HubSpot.
    """
    return jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        autoescape=autoescape,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def construct_jinja2_template_from_file(template_path: Path | str, environment: jinja2.Environment | None = None) -> jinja2.Template:
    """Construct a Jinja2 template from a file."""
    if environment is None:
        environment = construct_jinja2_environment()
    try:
        with open(template_path, encoding="utf-8") as f:
            template_content = f.read()
    except FileNotFoundError:
        logger.error("Jinja2 template not found", template_path=str(template_path))
        raise
    return environment.from_string(template_content)


def render_template(template: jinja2.Template, context: dict[str, Any]) -> str:
    """Render a Jinja2 template against a context dictionary."""
    try:
        rendered_template = template.render(context)
    except jinja2.UndefinedError as exc:
        logger.error("Failed to render template", template=template.name, context_keys=sorted(context), error=str(exc))
        raise
    return rendered_template.strip()
