"""Localized error page shown when a message could not be relayed.

The page reproduces the submitted subject and body so the user can copy
them and try again later. Both are user input: Jinja2 autoescaping is on for
the .html templates and the paragraph filter escapes before it inserts any
markup of its own.
"""

from __future__ import annotations

import os

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(__file__)), "templates"
)

_TEMPLATES = {
    "de": "send-error.de.html",
}
_DEFAULT_TEMPLATE = "send-error.html"


def render_paragraphs(value: str) -> Markup:
    """Split on blank lines into <p> blocks, escaping each paragraph."""
    paragraphs = escape(value).split("\n\n")
    return Markup("<p>") + Markup("</p><p>").join(paragraphs) + Markup("</p>")


class ErrorPagePresenter:
    def __init__(
        self,
        site_root: str = "https://hovinen.tech",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._site_root = site_root
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self._jinja.filters["paragraphs"] = render_paragraphs

    def render(self, subject: str, body: str, language: str) -> str:
        template = self._jinja.get_template(
            _TEMPLATES.get(language, _DEFAULT_TEMPLATE)
        )
        return template.render(
            site_root=self._site_root, subject=subject, body=body
        )
