# access_scout/crawler/content.py
"""Structured content extraction for deep page review.

The rendered DOM is serialised by the browser and parsed here with
BeautifulSoup. The result is a :class:`PageContent` carrying what a visual /
content-quality reviewer needs and what axe-core does not judge:

* a visible-text sample (scripts, styles and hidden nodes removed);
* form controls, flagged when the placeholder is their only label;
* links and buttons, flagged when their text is generic ("click here");
* error and live-region elements;
* instructions relying on colour or position ("click the red button").
"""
from __future__ import annotations

import re
from collections.abc import Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from access_scout.crawler.models import FormControl, InteractiveElement, LiveRegion, PageContent

__all__: Sequence[str] = ("GENERIC_LINK_PHRASES", "SENSORY_PATTERN", "extract_content")

GENERIC_LINK_PHRASES: frozenset[str] = frozenset(
    {
        "click here",
        "click",
        "here",
        "read more",
        "learn more",
        "more",
        "more info",
        "more information",
        "details",
        "link",
        "this link",
        "go",
        "continue",
        "see more",
    }
)

SENSORY_PATTERN = re.compile(
    r"\b(?:red|green|blue|yellow|orange|purple|pink|gray|grey|black|white"
    r"|left|right|top|bottom|above|below|round|square|circular)\s+"
    r"(?:button|link|icon|box|field|menu|tab|section|area|arrow|image|text"
    r"|column|sidebar|panel|banner|corner|bar)s?\b",
    re.IGNORECASE,
)

_SKIPPED_TAGS = ["script", "style", "noscript", "template", "svg"]
_NON_FIELD_INPUTS = {"hidden", "submit", "button", "reset", "image"}
_BUTTON_INPUTS = {"submit", "button", "reset"}
_MAX_ITEMS = 50


def _text(tag: Tag) -> str:
    return " ".join(tag.get_text(" ", strip=True).split())


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value.strip() if isinstance(value, str) else ""


def _is_hidden(tag: Tag) -> bool:
    if tag.has_attr("hidden") or _attr(tag, "aria-hidden").lower() == "true":
        return True
    style = _attr(tag, "style").replace(" ", "").lower()
    return "display:none" in style or "visibility:hidden" in style


def _label_for(control: Tag, soup: BeautifulSoup) -> str:
    aria = _attr(control, "aria-label")
    if aria:
        return aria
    labelledby = _attr(control, "aria-labelledby")
    if labelledby:
        parts = [soup.find(id=ref) for ref in labelledby.split()]
        text = " ".join(_text(p) for p in parts if isinstance(p, Tag))
        if text:
            return text
    control_id = _attr(control, "id")
    if control_id:
        label = soup.find("label", attrs={"for": control_id})
        if isinstance(label, Tag) and _text(label):
            return _text(label)
    wrapper = control.find_parent("label")
    if isinstance(wrapper, Tag):
        return _text(wrapper)
    return _attr(control, "title")


def _is_generic(text: str) -> bool:
    return text.lower().strip(" .!:>»→") in GENERIC_LINK_PHRASES


def _form_controls(soup: BeautifulSoup) -> list[FormControl]:
    controls: list[FormControl] = []
    for tag in soup.find_all(["input", "select", "textarea"]):
        if not isinstance(tag, Tag):
            continue
        kind = _attr(tag, "type").lower() or ("text" if tag.name == "input" else tag.name)
        if tag.name == "input" and kind in _NON_FIELD_INPUTS:
            continue
        label = _label_for(tag, soup)
        placeholder = _attr(tag, "placeholder")
        controls.append(
            FormControl(
                tag=tag.name,
                type=kind,
                name=_attr(tag, "name") or _attr(tag, "id"),
                label=label,
                placeholder=placeholder,
                placeholder_only_label=bool(placeholder) and not label,
            )
        )
    return controls


def _interactive_elements(soup: BeautifulSoup) -> list[InteractiveElement]:
    elements: list[InteractiveElement] = []
    for tag in soup.find_all(["a", "button", "input"]):
        if not isinstance(tag, Tag):
            continue
        if tag.name == "a" and not tag.has_attr("href"):
            continue
        if tag.name == "input":
            if _attr(tag, "type").lower() not in _BUTTON_INPUTS:
                continue
            text = _attr(tag, "value")
        else:
            text = _text(tag) or _attr(tag, "aria-label")
        elements.append(
            InteractiveElement(
                tag=tag.name,
                text=text,
                href=_attr(tag, "href"),
                generic_text=_is_generic(text),
            )
        )
    for tag in soup.find_all(attrs={"role": "button"}):
        if isinstance(tag, Tag) and tag.name not in ("a", "button", "input"):
            text = _text(tag) or _attr(tag, "aria-label")
            elements.append(
                InteractiveElement(
                    tag=tag.name,
                    text=text,
                    href="",
                    generic_text=_is_generic(text),
                )
            )
    return elements


def _is_live_region(tag: Tag) -> bool:
    if tag.has_attr("aria-live"):
        return True
    if _attr(tag, "role").lower() in ("alert", "status", "alertdialog"):
        return True
    classes = _attr(tag, "class").lower()
    return any(marker in classes for marker in ("error", "invalid", "alert"))


def _live_regions(soup: BeautifulSoup) -> list[LiveRegion]:
    return [
        LiveRegion(
            tag=tag.name,
            role=_attr(tag, "role"),
            aria_live=_attr(tag, "aria-live"),
            text=_text(tag)[:200],
        )
        for tag in soup.find_all(_is_live_region)
    ]


def _sensory_phrases(text: str) -> list[str]:
    phrases: list[str] = []
    for match in SENSORY_PATTERN.finditer(text):
        phrase = match.group(0).lower()
        if phrase not in phrases:
            phrases.append(phrase)
    return phrases


def extract_content(html: str, *, text_chars: int = 3000) -> PageContent:
    """Parse rendered *html* into a :class:`PageContent`."""
    soup = BeautifulSoup(html, "html.parser")

    forms = _form_controls(soup)
    interactive = _interactive_elements(soup)
    live = _live_regions(soup)

    for element in soup(_SKIPPED_TAGS):
        element.decompose()
    for element in soup.find_all(_is_hidden):
        if not element.decomposed:
            element.decompose()
    body = soup.body or soup
    text = " ".join(body.get_text(" ", strip=True).split())

    stats = {
        "form_controls": len(forms),
        "placeholder_only_labels": sum(1 for f in forms if f.placeholder_only_label),
        "interactive_elements": len(interactive),
        "generic_link_texts": sum(1 for e in interactive if e.generic_text),
        "live_regions": len(live),
        "word_count": len(text.split()),
    }
    sensory = _sensory_phrases(text)
    stats["sensory_phrases"] = len(sensory)

    return PageContent(
        text_sample=text[:text_chars],
        form_controls=forms[:_MAX_ITEMS],
        interactive_elements=interactive[:_MAX_ITEMS],
        live_regions=live[:_MAX_ITEMS],
        sensory_phrases=sensory,
        stats=stats,
    )
