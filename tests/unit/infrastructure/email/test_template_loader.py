"""
Unit tests for the email template loader.
"""

import pytest
from decimal import Decimal
from unittest.mock import patch

from app.infrastructure.email.exceptions import TemplateDataError, TemplateNotFoundError
from app.infrastructure.email.languages import Lang
from app.infrastructure.email.template_loader import (
    EmailTemplateLoader,
    format_currency,
    format_date,
    strip_to_text,
)


@pytest.fixture
def templates_dir(tmp_path):
    folder = tmp_path / "welcome-email"
    folder.mkdir()
    (folder / "en.html").write_text("<p>Welcome, {{ user_name }}!</p>", encoding="utf-8")
    (folder / "de.html").write_text("<p>Willkommen, {{ user_name }}!</p>", encoding="utf-8")
    broken = tmp_path / "broken"
    broken.mkdir()
    (broken / "en.html").write_text("<p>{% if %}</p>", encoding="utf-8")
    filtered = tmp_path / "order-summary"
    filtered.mkdir()
    (filtered / "en.html").write_text(
        "<p>{{ placed_at | date }}: {{ total | currency }}</p>", encoding="utf-8"
    )
    return tmp_path


class TestStripToText:
    """Test cases for strip_to_text."""

    def test_strips_style_and_tags(self):
        """Test the documented example."""
        assert strip_to_text("<style>.a{color:red}</style><p>Hi&nbsp;there</p>") == "Hi there"

    def test_strips_script_blocks_case_insensitive(self):
        """Test that script blocks are removed regardless of case."""
        html = "<SCRIPT type='text/javascript'>\nalert(1)\n</SCRIPT><b>Order</b> placed"
        assert strip_to_text(html) == "Order placed"

    def test_multiline_style(self):
        """Test that multi-line style blocks are removed."""
        html = "<style>\nbody {\n  color: #333;\n}\n</style>\n  <div>Total</div>  "
        assert strip_to_text(html) == "Total"


class TestFilters:
    """Test cases for template filters."""

    def test_currency_eur(self):
        assert format_currency(Decimal("1234.5"), "EUR") == "1,234.50 €"

    def test_currency_usd(self):
        assert format_currency("29.9", "USD") == "$29.90"

    def test_currency_other(self):
        assert format_currency(10, "CHF") == "10.00 CHF"

    def test_date_from_iso_string(self):
        assert format_date("2025-03-01T10:00:00Z") == "01.03.2025"
        assert format_date("2025-03-01T10:00:00Z", "%Y-%m-%d") == "2025-03-01"


class TestEmailTemplateLoader:
    """Test cases for EmailTemplateLoader."""

    @pytest.mark.asyncio
    async def test_render_language_template(self, templates_dir):
        """Test rendering picks the file for the given language."""
        loader = EmailTemplateLoader(templates_dir)

        assert await loader.render("welcome-email", Lang.EN, {"user_name": "X"}) == "<p>Welcome, X!</p>"
        assert await loader.render("welcome-email", Lang.DE, {"user_name": "X"}) == "<p>Willkommen, X!</p>"

    @pytest.mark.asyncio
    async def test_render_is_idempotent_and_reads_file_once(self, templates_dir):
        """Test that the compiled template is cached per email and language."""
        loader = EmailTemplateLoader(templates_dir)

        with patch.object(loader, "_read_source", wraps=loader._read_source) as read_spy:
            first = await loader.render("welcome-email", Lang.EN, {"user_name": "X"})
            second = await loader.render("welcome-email", Lang.EN, {"user_name": "X"})

        assert first == second
        assert read_spy.call_count == 1
        assert loader.is_cached("welcome-email", Lang.EN)
        assert not loader.is_cached("welcome-email", Lang.DE)

    @pytest.mark.asyncio
    async def test_cache_is_not_invalidated(self, templates_dir):
        """Test that file changes after the first render are not picked up."""
        loader = EmailTemplateLoader(templates_dir)
        await loader.render("welcome-email", Lang.EN, {"user_name": "X"})

        (templates_dir / "welcome-email" / "en.html").write_text("<p>Changed</p>", encoding="utf-8")

        assert await loader.render("welcome-email", Lang.EN, {"user_name": "X"}) == "<p>Welcome, X!</p>"

    @pytest.mark.asyncio
    async def test_missing_field_raises_template_data_error(self, templates_dir):
        """Test strict variable resolution."""
        loader = EmailTemplateLoader(templates_dir)

        with pytest.raises(TemplateDataError) as exc_info:
            await loader.render("welcome-email", Lang.EN, {})

        assert "user_name" in str(exc_info.value)
        assert exc_info.value.code == "TEMPLATE_DATA_ERROR"

    @pytest.mark.asyncio
    async def test_missing_file_raises_template_not_found(self, templates_dir):
        """Test that a missing language file raises TemplateNotFoundError."""
        loader = EmailTemplateLoader(templates_dir)

        with pytest.raises(TemplateNotFoundError):
            await loader.render("order-confirmation", Lang.EN, {})

        assert not loader.is_cached("order-confirmation", Lang.EN)

    @pytest.mark.asyncio
    async def test_syntax_error_raises_template_data_error(self, templates_dir):
        """Test that templates that do not compile are reported and not cached."""
        loader = EmailTemplateLoader(templates_dir)

        with pytest.raises(TemplateDataError):
            await loader.render("broken", Lang.EN, {})

        assert not loader.is_cached("broken", Lang.EN)

    @pytest.mark.asyncio
    async def test_values_are_html_escaped(self, templates_dir):
        """Test that data is autoescaped."""
        loader = EmailTemplateLoader(templates_dir)

        html = await loader.render("welcome-email", Lang.EN, {"user_name": "<b>X</b>"})

        assert html == "<p>Welcome, &lt;b&gt;X&lt;/b&gt;!</p>"

    @pytest.mark.asyncio
    async def test_render_accepts_objects(self, templates_dir):
        """Test that attribute-based data objects are accepted."""

        class Data:
            def __init__(self):
                self.user_name = "Robert"

        loader = EmailTemplateLoader(templates_dir)

        assert await loader.render("welcome-email", "en", Data()) == "<p>Welcome, Robert!</p>"

    @pytest.mark.asyncio
    async def test_render_accepts_self_key(self, templates_dir):
        """Test that a data key named self does not clash with the render call."""
        loader = EmailTemplateLoader(templates_dir)

        html = await loader.render("welcome-email", Lang.EN, {"user_name": "X", "self": "me"})

        assert html == "<p>Welcome, X!</p>"

    @pytest.mark.asyncio
    async def test_filters_render_valid_data(self, templates_dir):
        """Test the date and currency filters inside a template."""
        loader = EmailTemplateLoader(templates_dir)

        html = await loader.render(
            "order-summary", Lang.EN, {"placed_at": "2025-03-01T10:00:00Z", "total": "19.9"}
        )

        assert html == "<p>01.03.2025: 19.90 €</p>"

    @pytest.mark.asyncio
    async def test_invalid_date_raises_template_data_error(self, templates_dir):
        """Test that a non-ISO date is reported as a data error."""
        loader = EmailTemplateLoader(templates_dir)

        with pytest.raises(TemplateDataError) as exc_info:
            await loader.render("order-summary", Lang.EN, {"placed_at": "yesterday", "total": 1})

        assert exc_info.value.code == "TEMPLATE_DATA_ERROR"
        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_invalid_amount_raises_template_data_error(self, templates_dir):
        """Test that a non-numeric amount is reported as a data error."""
        loader = EmailTemplateLoader(templates_dir)

        with pytest.raises(TemplateDataError) as exc_info:
            await loader.render(
                "order-summary", Lang.EN, {"placed_at": "2025-03-01", "total": "a lot"}
            )

        assert isinstance(exc_info.value.__cause__, ArithmeticError)

    @pytest.mark.asyncio
    async def test_wrong_value_type_raises_template_data_error(self, templates_dir):
        """Test that a value the date filter cannot format is reported as a data error."""
        loader = EmailTemplateLoader(templates_dir)

        with pytest.raises(TemplateDataError):
            await loader.render("order-summary", Lang.EN, {"placed_at": 20250301, "total": 1})

    def test_template_helpers(self, templates_dir):
        """Test path, existence and info helpers."""
        loader = EmailTemplateLoader(templates_dir, extension="html")

        assert loader.template_path("welcome-email", Lang.DE) == templates_dir / "welcome-email" / "de.html"
        assert loader.template_exists("welcome-email", Lang.EN)
        assert not loader.template_exists("broken", Lang.DE)
        assert loader.list_languages("welcome-email") == [Lang.DE, Lang.EN]
        assert loader.get_template_info("broken", Lang.DE) == {"exists": False}

        info = loader.get_template_info("welcome-email", Lang.EN)
        assert info["exists"] is True
        assert info["lang"] == "en"
        assert info["cached"] is False
