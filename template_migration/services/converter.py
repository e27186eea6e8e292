"""Conversion of HubSpot (HubL) template markup into Content Builder templates."""

import re
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..errors import ConversionError
from ..models.template import ConvertedTemplate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkupMatch:
    """The field a template's markup was taken from, and the markup."""
    field: str
    markup: str


MarkupExtractor = Callable[[Dict[str, Any]], Optional[MarkupMatch]]

PRIMARY_MARKUP_FIELDS = ("source", "content", "html")
FALLBACK_MARKUP_FIELDS = ("body", "htmlContent", "htmlBody", "design", "template")


def field_extractor(name: str) -> MarkupExtractor:
    """Accept ``name`` when it holds a non-empty string."""
    def extract(raw: Dict[str, Any]) -> Optional[MarkupMatch]:
        value = raw.get(name)
        if isinstance(value, str) and value.strip():
            return MarkupMatch(name, value)
        return None

    extract.__name__ = f"field_{name}"
    return extract


def html_scan_extractor(names: Sequence[str]) -> MarkupExtractor:
    """Accept the first of ``names`` whose value is a string that looks like HTML."""
    def extract(raw: Dict[str, Any]) -> Optional[MarkupMatch]:
        for name in names:
            value = raw.get(name)
            if isinstance(value, str) and "<" in value:
                return MarkupMatch(name, value)
        return None

    extract.__name__ = "html_scan"
    return extract


MARKUP_EXTRACTORS: List[MarkupExtractor] = [
    *(field_extractor(name) for name in PRIMARY_MARKUP_FIELDS),
    html_scan_extractor(FALLBACK_MARKUP_FIELDS),
]


def find_markup(
    raw: Dict[str, Any],
    extractors: Optional[Sequence[MarkupExtractor]] = None
) -> Optional[MarkupMatch]:
    """
    Find the authoritative markup of a source template.

    Extractors are tried in order and the first match wins. Structured
    (non-string) payloads never match.

    Args:
        raw: Source template payload
        extractors: Override the extractor order

    Returns:
        MarkupMatch, or None if the template has no usable markup
    """
    for extractor in extractors if extractors is not None else MARKUP_EXTRACTORS:
        match = extractor(raw)
        if match is not None:
            return match
    return None


def resolve_markup(raw: Dict[str, Any]) -> Optional[str]:
    """Markup string of a source template, or None."""
    match = find_markup(raw)
    return match.markup if match else None


def resolve_custom_markup(template: Dict[str, Any]) -> str:
    """Markup of a caller-supplied template, falling back to a placeholder."""
    for name in ("content", "html"):
        value = template.get(name)
        if isinstance(value, str) and value:
            return value
    return f"<p>Template: {template.get('name')}</p>"


class TemplateConverter:
    """
    Converts HubL markup to the Content Builder template model.

    Supports:
    - HubL comments
    - Contact personalization tokens and email system tokens
    - Editable regions (dnd areas, widget blocks, modules) as slots
    - Channel inference from structural markers
    """

    DEFAULT_SLOT = "main"
    SLOT_DESIGN = '<p style="text-align:center;">Drop blocks or content here</p>'

    # contact.<property> -> SFMC personalization string
    PERSONALIZATION_MAP = {
        "firstname": "%%FirstName%%",
        "lastname": "%%LastName%%",
        "email": "%%emailaddr%%",
        "company": "%%Company%%",
    }

    SYSTEM_TOKENS = {
        "unsubscribe_link": "%%unsub_center_url%%",
        "unsubscribe_link_all": "%%unsub_center_url%%",
        "unsubscribe_section": "%%profile_center_url%%",
        "subscription_preferences_url": "%%profile_center_url%%",
        "view_as_page_url": "%%view_email_url%%",
        "site_settings.company_name": "%%Member_Busname%%",
        "site_settings.company_street_address_1": "%%Member_Addr%%",
        "site_settings.company_city": "%%Member_City%%",
        "site_settings.company_state": "%%Member_State%%",
        "site_settings.company_zip": "%%Member_PostalCode%%",
        "site_settings.company_country": "%%Member_Country%%",
    }

    WEB_MARKERS = (
        "standard_header_includes",
        "standard_footer_includes",
        "require_css",
        "require_js",
        "<script",
    )
    EMAIL_MARKERS = (
        "unsubscribe",
        "view_as_page_url",
        "subscription_preferences",
        "<!--[if mso",
        'role="presentation"',
    )

    _COMMENT_RE = re.compile(r"\{#(.*?)#\}", re.DOTALL)
    _PAIRED_REGION_RE = re.compile(
        r"\{%-?\s*(dnd_area|widget_block|module_block)\b(.*?)-?%\}(.*?)\{%-?\s*end_\1\s*-?%\}",
        re.DOTALL,
    )
    _MODULE_RE = re.compile(r"\{%-?\s*(module|widget)\b(.*?)-?%\}", re.DOTALL)
    _INLINE_MODULE_RE = re.compile(r"\{%-?\s*(dnd_module|module|widget)\b(.*?)-?%\}", re.DOTALL)
    _LAYOUT_TAG_RE = re.compile(
        r"\{%-?\s*(?:end_)?(?:dnd_section|dnd_row|dnd_column|dnd_module|module_attribute|widget_attribute)\b.*?-?%\}",
        re.DOTALL,
    )
    _EXPRESSION_RE = re.compile(r"\{\{-?\s*(.*?)\s*-?\}\}", re.DOTALL)
    _STATEMENT_RE = re.compile(r"\{%-?\s*(\w+)?.*?-?%\}", re.DOTALL)
    _QUOTED_RE = re.compile(r"""(["'])(.+?)\1""")
    _HTML_PARAM_RE = re.compile(r"""\bhtml\s*=\s*(["'])(.*?)(?<!\\)\1""", re.DOTALL)
    _PERSONALIZATION_FN_RE = re.compile(
        r"""personalization_token\(\s*["']contact\.(\w+)["']"""
    )
    _BODY_RE = re.compile(r"(<body\b[^>]*>)(.*)(</body\s*>)", re.DOTALL | re.IGNORECASE)

    def convert(self, markup: str, name: Optional[str] = None) -> ConvertedTemplate:
        """
        Convert template markup.

        Args:
            markup: HubL/HTML markup
            name: Template name, used for logging only

        Returns:
            ConvertedTemplate with content, channels and slots

        Raises:
            ConversionError: If the markup is empty or not a string
        """
        if not isinstance(markup, str) or not markup.strip():
            raise ConversionError(f"Template '{name}' has no markup to convert")

        warnings: List[str] = []
        channels = self.infer_channels(markup)

        text = self._COMMENT_RE.sub(lambda m: f"<!--{m.group(1)}-->", markup)

        slots: Dict[str, Dict[str, Any]] = {}
        text = self._PAIRED_REGION_RE.sub(
            lambda m: self._add_slot(slots, m.group(2), self._inline_modules(m.group(3)), warnings),
            text,
        )
        text = self._MODULE_RE.sub(
            lambda m: self._add_slot(slots, m.group(2), self._module_html(m.group(2)), warnings),
            text,
        )

        if not slots:
            text = self._default_slot(text, slots)

        content = self._convert_hubl(text, warnings)
        for slot in slots.values():
            slot["content"] = self._convert_hubl(slot["content"], warnings)

        warnings = list(dict.fromkeys(warnings))
        if warnings:
            logger.debug(f"Converted template {name}: {len(warnings)} warnings")

        return ConvertedTemplate(content=content, channels=channels, slots=slots, warnings=warnings)

    def infer_channels(self, markup: str) -> Dict[str, bool]:
        """Email unless only web markers are present; web when web markers are present."""
        lowered = markup.lower()
        web = any(marker in lowered for marker in self.WEB_MARKERS)
        email = any(marker in lowered for marker in self.EMAIL_MARKERS) or not web
        return {"email": email, "web": web}

    def _add_slot(
        self,
        slots: Dict[str, Dict[str, Any]],
        args: str,
        inner: str,
        warnings: List[str]
    ) -> str:
        key = self._slot_key(args, slots)
        slots[key] = {"content": inner.strip(), "design": self.SLOT_DESIGN}
        return self._slot_placeholder(key)

    def _slot_key(self, args: str, slots: Dict[str, Any]) -> str:
        quoted = self._QUOTED_RE.search(args or "")
        if quoted:
            base = quoted.group(2)
        else:
            words = (args or "").split()
            base = words[0] if words else f"slot_{len(slots) + 1}"

        base = re.sub(r"[^A-Za-z0-9_-]+", "_", base).strip("_") or f"slot_{len(slots) + 1}"

        key = base
        suffix = 2
        while key in slots:
            key = f"{base}_{suffix}"
            suffix += 1
        return key

    def _module_html(self, args: str) -> str:
        match = self._HTML_PARAM_RE.search(args or "")
        if not match:
            return ""
        return match.group(2).replace(f"\\{match.group(1)}", match.group(1))

    def _inline_modules(self, text: str) -> str:
        """Replace modules nested in a region with their html and drop layout tags."""
        text = self._INLINE_MODULE_RE.sub(lambda m: self._module_html(m.group(2)), text)
        return self._LAYOUT_TAG_RE.sub("", text)

    @staticmethod
    def _slot_placeholder(key: str) -> str:
        return f'<div data-type="slot" data-key="{key}"></div>'

    def _default_slot(self, text: str, slots: Dict[str, Dict[str, Any]]) -> str:
        """Turn the body (or the whole markup) into a single slot."""
        placeholder = self._slot_placeholder(self.DEFAULT_SLOT)
        text = self._inline_modules(text)
        body = self._BODY_RE.search(text)

        if body:
            slots[self.DEFAULT_SLOT] = {"content": body.group(2).strip(), "design": self.SLOT_DESIGN}
            return text[:body.start(2)] + placeholder + text[body.end(2):]

        slots[self.DEFAULT_SLOT] = {"content": text.strip(), "design": self.SLOT_DESIGN}
        return placeholder

    def _convert_hubl(self, text: str, warnings: List[str]) -> str:
        text = self._EXPRESSION_RE.sub(lambda m: self._convert_expression(m, warnings), text)
        return self._STATEMENT_RE.sub(lambda m: self._drop_statement(m, warnings), text)

    def _convert_expression(self, match: "re.Match[str]", warnings: List[str]) -> str:
        expression = match.group(1)
        base = expression.split("|", 1)[0].strip()

        if base in self.SYSTEM_TOKENS:
            return self.SYSTEM_TOKENS[base]

        if base.startswith("contact."):
            return self._personalization(base[len("contact."):])

        token_fn = self._PERSONALIZATION_FN_RE.search(base)
        if token_fn:
            return self._personalization(token_fn.group(1))

        warnings.append(f"Unmapped HubL expression: {{{{ {expression} }}}}")
        return match.group(0)

    def _personalization(self, prop: str) -> str:
        return self.PERSONALIZATION_MAP.get(prop.lower(), f"%%{prop}%%")

    @staticmethod
    def _drop_statement(match: "re.Match[str]", warnings: List[str]) -> str:
        tag = match.group(1) or "statement"
        warnings.append(f"Removed unsupported HubL tag: {tag}")
        return ""
