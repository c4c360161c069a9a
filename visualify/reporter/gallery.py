"""Gallery renderer: writes gallery.html from ranked entries."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from jinja2 import Environment, PackageLoader, TemplateNotFound, select_autoescape

from visualify.errors import SetupError
from visualify.models.gallery import GalleryEntry

logger = logging.getLogger(__name__)

GALLERY_FILENAME = "gallery.html"

_env = Environment(
    loader=PackageLoader("visualify", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def available_templates() -> list[str]:
    return sorted(name[: -len(".html")] for name in _env.list_templates(extensions=["html"]))


def render_gallery(entries: list[GalleryEntry], template_name: str) -> str:
    try:
        template = _env.get_template(f"{template_name}.html")
    except TemplateNotFound:
        raise SetupError(
            f"Template not found: {template_name} (available: {', '.join(available_templates())})"
        ) from None
    return template.render(
        gallery_generated=time.strftime("%Y-%m-%d %H:%M:%S"),
        entries=[e.model_dump() for e in entries],
    )


def write_gallery(entries: list[GalleryEntry], output_dir: Path, template_name: str) -> Path:
    html = render_gallery(entries, template_name)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / GALLERY_FILENAME
    path.write_text(html, encoding="utf-8")
    logger.info("Gallery generated: %s", path)
    return path
