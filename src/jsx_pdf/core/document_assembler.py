"""
Document assembler.

Wraps a rendered HTML fragment into a complete, self-contained HTML document
using a Jinja2 template with the utility CSS inlined.
"""

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "resources"
DOCUMENT_TEMPLATE = "document.html"


class DocumentAssembler:
    """
    Builds the final HTML document loaded by the PDF engine.

    Features:
    - Doctype, UTF-8 charset and escaped title
    - Single inlined <style> block with the full stylesheet
    - Fragment inserted verbatim as body content
    - No external resource references added
    """

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize the DocumentAssembler.

        Args:
            template_dir: Directory holding ``document.html``; defaults to the
                bundled resources
        """
        self.template_dir = Path(template_dir) if template_dir else TEMPLATES_DIR
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.jinja_env.get_template(DOCUMENT_TEMPLATE)

    def assemble(self, html_fragment: str, css: str, title: str = "document.pdf") -> str:
        """
        Assemble a full HTML document.

        Args:
            html_fragment: Markup produced by the view renderer
            css: Stylesheet text to inline
            title: Document title (escaped)

        Returns:
            Complete HTML document
        """
        document = self.template.render(
            title=title,
            css=Markup(css),
            body=Markup(html_fragment),
        )
        logger.debug(f"Assembled document '{title}' ({len(document)} chars)")
        return document


_default_assembler: Optional[DocumentAssembler] = None


def assemble(html_fragment: str, css: str, title: str = "document.pdf") -> str:
    """Assemble a document with the shared default assembler."""
    global _default_assembler
    if _default_assembler is None:
        _default_assembler = DocumentAssembler()
    return _default_assembler.assemble(html_fragment, css, title)
