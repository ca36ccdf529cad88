"""Jinja2 rendering of the generator page view model."""

from pathlib import Path

from fastapi.templating import Jinja2Templates

from imagestudio.presentation.view import PageView

TEMPLATES_DIR = Path(__file__).parent / "templates"
PAGE_TEMPLATE = "index.html"
PROMPT_PLACEHOLDER = "e.g., A lighthouse on a rocky coast during a storm"

# Jinja2Templates turns autoescaping on for every template it loads
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def page_context(view: PageView, title: str) -> dict:
    return {
        "view": view,
        "title": title,
        "placeholder": PROMPT_PLACEHOLDER,
    }


def render_page(view: PageView, title: str = "Image Generator") -> str:
    """Render the full page document for a view."""
    template = templates.get_template(PAGE_TEMPLATE)
    return template.render(page_context(view, title))

