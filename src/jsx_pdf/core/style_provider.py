"""
Style provider for the utility stylesheet.

The CSS is read once when the provider is created and never changes for the
lifetime of the process, so it can be shared by concurrent requests.
"""

import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_STYLESHEET = Path(__file__).resolve().parent.parent / "resources" / "styles.css"


class StyleProvider:
    """Holds the utility CSS text loaded at startup."""

    def __init__(self, css_path: Optional[Union[str, Path]] = None):
        """
        Load the stylesheet.

        Args:
            css_path: Stylesheet to load; defaults to the bundled utility CSS

        Raises:
            FileNotFoundError: If the stylesheet does not exist
        """
        self.css_path = Path(css_path) if css_path else DEFAULT_STYLESHEET
        if not self.css_path.exists():
            raise FileNotFoundError(f"Stylesheet not found: {self.css_path}")

        self._css = self.css_path.read_text(encoding="utf-8")
        logger.info(f"Loaded stylesheet {self.css_path} ({len(self._css)} chars)")

    @property
    def css(self) -> str:
        return self._css
