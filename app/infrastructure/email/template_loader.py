"""
Email template loader and renderer.
Handles per-language Jinja2 templates laid out as <templates_dir>/<email_id>/<lang><ext>.
"""

import asyncio
import logging
import re
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

from jinja2 import Environment, StrictUndefined, Template, TemplateSyntaxError, UndefinedError

from .exceptions import TemplateDataError, TemplateNotFoundError
from .languages import Lang

logger = logging.getLogger(__name__)


_STYLE_RE = re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE)
_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def strip_to_text(html: str) -> str:
    """
    Best-effort plain text version of an HTML body.

    Drops <style> and <script> blocks and all remaining tags, turns &nbsp;
    into spaces and trims. Tables and links get no special treatment.
    """
    text = _STYLE_RE.sub("", html)
    text = _SCRIPT_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    text = text.replace("&nbsp;", " ")
    return text.strip()


def format_currency(value: Union[Decimal, float, int, str], currency: str = "EUR") -> str:
    """Format an amount with its currency code."""
    amount = Decimal(str(value))
    if currency == "EUR":
        return f"{amount:,.2f} €"
    elif currency == "USD":
        return f"${amount:,.2f}"
    return f"{amount:,.2f} {currency}"


def format_date(value: Union[str, date, datetime], format: str = "%d.%m.%Y") -> str:
    """Format an ISO date string, date or datetime."""
    if isinstance(value, str):
        # Parse ISO date string
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif not isinstance(value, date):
        raise TypeError(f"Cannot format {type(value).__name__} as a date")
    return value.strftime(format)


class EmailTemplateLoader:
    """Loads, compiles and caches email templates using Jinja2."""

    def __init__(self, templates_dir: Union[str, Path], extension: str = ".html"):
        """Initialize template loader for a templates root directory."""
        self.templates_dir = Path(templates_dir)
        self.extension = extension if extension.startswith(".") else f".{extension}"

        # Undefined variables raise instead of rendering empty
        self.env = Environment(
            autoescape=True,
            undefined=StrictUndefined,
        )
        self._compiled: Dict[Tuple[str, Lang], Template] = {}

        # Register custom filters
        self._register_filters()

    def _register_filters(self):
        """Register custom Jinja2 filters for email templates."""
        self.env.filters["currency"] = format_currency
        self.env.filters["date"] = format_date

    def template_path(self, email_id: str, lang: Lang) -> Path:
        """Path of the template file for one email and language."""
        return self.templates_dir / email_id / f"{Lang(lang).value}{self.extension}"

    async def render(self, email_id: str, lang: Lang, data: Any) -> str:
        """
        Render email template with data.

        Args:
            email_id: Registered email id (template folder name)
            lang: Language to render
            data: Template context; a mapping or an object whose attributes
                are exposed to the template

        Returns:
            Rendered HTML

        Raises:
            TemplateNotFoundError: if the file for this language does not exist
            TemplateDataError: if the template references data that is missing,
                a filter cannot handle a value, or the template does not compile
        """
        template = await self.get_template(email_id, lang)
        try:
            # Passed positionally so a "self" key cannot clash with render()
            return template.render(self._context(data))
        except (UndefinedError, ValueError, TypeError, ArithmeticError) as e:
            raise TemplateDataError(email_id, lang, str(e)) from e

    async def get_template(self, email_id: str, lang: Lang) -> Template:
        """Return the compiled template, reading and compiling it on first use."""
        lang = Lang(lang)
        key = (email_id, lang)
        compiled = self._compiled.get(key)
        if compiled is not None:
            return compiled

        path = self.template_path(email_id, lang)
        source = await asyncio.to_thread(self._read_source, email_id, lang, path)
        try:
            compiled = self.env.from_string(source)
        except TemplateSyntaxError as e:
            raise TemplateDataError(email_id, lang, f"line {e.lineno}: {e.message}") from e

        self._compiled[key] = compiled
        logger.debug(f"Compiled template {path}")
        return compiled

    def _read_source(self, email_id: str, lang: Lang, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise TemplateNotFoundError(email_id, lang, path) from e

    @staticmethod
    def _context(data: Any) -> Dict[str, Any]:
        if data is None:
            return {}
        if isinstance(data, Mapping):
            return dict(data)
        if hasattr(data, "model_dump"):
            return data.model_dump()
        return dict(vars(data))

    def is_cached(self, email_id: str, lang: Lang) -> bool:
        return (email_id, Lang(lang)) in self._compiled

    def template_exists(self, email_id: str, lang: Lang) -> bool:
        """Check if template file exists."""
        return self.template_path(email_id, lang).exists()

    def list_languages(self, email_id: str) -> List[Lang]:
        """Languages that have a template file for this email."""
        folder = self.templates_dir / email_id
        languages = []
        for lang in Lang:
            if (folder / f"{lang.value}{self.extension}").exists():
                languages.append(lang)
        return languages

    def get_template_info(self, email_id: str, lang: Lang) -> Dict[str, Any]:
        """Get information about a specific template."""
        template_path = self.template_path(email_id, lang)

        if not template_path.exists():
            return {"exists": False}

        stat = template_path.stat()

        return {
            "exists": True,
            "email_id": email_id,
            "lang": Lang(lang).value,
            "size": stat.st_size,
            "modified": datetime.fromtimestamp(stat.st_mtime).isoformat(),
            "path": str(template_path),
            "cached": self.is_cached(email_id, lang),
        }