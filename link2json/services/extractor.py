"""
Single-pass HTML field extraction.

The document is fed through one streaming `HTMLParser`. Every element it
visits is offered to a fixed set of field matchers; each matcher recognizes
one element shape and writes one field of the MetadataRecord. Matchers are
independent of each other, so first-wins fields keep document order without
re-scanning.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Iterable, Sequence

from link2json.schemas.metadata import ImageDescriptor, MetadataRecord
from link2json.services.urls import base_domain, resolve_against_domain

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")

ICON_RELS = frozenset(
    {
        "icon",
        "shortcut icon",
        "apple-touch-icon",
        "apple-touch-icon-precomposed",
    }
)


@dataclass
class Element:
    tag: str
    attrs: dict[str, str]
    text: str = ""

    def attr(self, name: str) -> str:
        return self.attrs.get(name, "")


@dataclass
class ExtractionContext:
    """State shared by the matchers of one scan."""

    record: MetadataRecord
    image: ImageDescriptor = field(default_factory=ImageDescriptor)


class FieldMatcher:
    """Base for objects notified of every element the scan visits."""

    tag: str = ""
    # True when the matcher needs the element's text, which is only known
    # once the element closes.
    wants_text: bool = False

    def matches(self, element: Element) -> bool:
        return element.tag == self.tag

    def on_element(self, element: Element, context: ExtractionContext) -> None:
        raise NotImplementedError

    def on_finish(self, context: ExtractionContext) -> None:
        pass


class MetaMatcher(FieldMatcher):
    """Matches <meta {key}="{value}"> and hands its `content` to `on_content`."""

    tag = "meta"

    def __init__(self, key: str, value: str) -> None:
        self.key = key
        self.value = value

    def matches(self, element: Element) -> bool:
        return element.tag == self.tag and element.attr(self.key) == self.value

    def on_element(self, element: Element, context: ExtractionContext) -> None:
        self.on_content(element.attr("content"), context)

    def on_content(self, content: str, context: ExtractionContext) -> None:
        raise NotImplementedError


class TitleMatcher(FieldMatcher):
    tag = "title"
    wants_text = True

    def on_element(self, element: Element, context: ExtractionContext) -> None:
        # whitespace-only titles do not count, but a real title keeps its spacing
        if element.text.strip() and not context.record.title:
            context.record.title = element.text


class DescriptionMatcher(MetaMatcher):
    def __init__(self) -> None:
        super().__init__("name", "description")

    def on_content(self, content: str, context: ExtractionContext) -> None:
        context.record.description = content


class FaviconMatcher(FieldMatcher):
    tag = "link"

    def matches(self, element: Element) -> bool:
        return (
            element.tag == self.tag
            and element.attr("rel").strip().lower() in ICON_RELS
            and bool(element.attr("href"))
        )

    def on_element(self, element: Element, context: ExtractionContext) -> None:
        record = context.record
        if not record.favicon:
            record.favicon = resolve_against_domain(record.domain, element.attr("href"))


class SiteNameMatcher(MetaMatcher):
    """og:site_name, or og:title when scanning the domain root as a fallback."""

    def __init__(self, prop: str = "og:site_name") -> None:
        super().__init__("property", prop)

    def on_content(self, content: str, context: ExtractionContext) -> None:
        context.record.sitename = content


class ImageFieldMatcher(MetaMatcher):
    """Writes one og:image* property into the in-progress image descriptor."""

    def __init__(self, prop: str, attribute: str, numeric: bool = False) -> None:
        super().__init__("property", prop)
        self.attribute = attribute
        self.numeric = numeric

    def on_content(self, content: str, context: ExtractionContext) -> None:
        if not self.numeric:
            setattr(context.image, self.attribute, content)
            return
        if _INTEGER.fullmatch(content):
            setattr(context.image, self.attribute, int(content))
        else:
            logger.debug("Ignoring non-integer %s=%r", self.value, content)


class ImageCollector(FieldMatcher):
    """Appends the in-progress image descriptor once the document ends."""

    def matches(self, element: Element) -> bool:
        return False

    def on_finish(self, context: ExtractionContext) -> None:
        context.record.images.append(context.image)


def page_matchers() -> list[FieldMatcher]:
    return [
        TitleMatcher(),
        DescriptionMatcher(),
        FaviconMatcher(),
        SiteNameMatcher(),
        ImageFieldMatcher("og:image", "url"),
        ImageFieldMatcher("og:image:alt", "alt"),
        ImageFieldMatcher("og:image:type", "type"),
        ImageFieldMatcher("og:image:width", "width", numeric=True),
        ImageFieldMatcher("og:image:height", "height", numeric=True),
        ImageCollector(),
    ]


def site_name_fallback_matchers() -> list[FieldMatcher]:
    return [SiteNameMatcher("og:title")]


class _ElementScanner(HTMLParser):
    def __init__(self, extractor: HTMLFieldExtractor) -> None:
        super().__init__(convert_charrefs=True)
        self._extractor = extractor
        # Elements whose text some matcher is waiting for, innermost last.
        self._open: list[tuple[Element, list[FieldMatcher], list[str]]] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        attrs_dict: dict[str, str] = {}
        for key, value in attrs:
            attrs_dict.setdefault(key, value or "")
        element = Element(tag=tag, attrs=attrs_dict)

        matched = self._extractor.matching(element)
        if not matched:
            return
        waiting = [m for m in matched if m.wants_text]
        self._extractor.dispatch(element, [m for m in matched if not m.wants_text])
        if waiting:
            self._open.append((element, waiting, []))

    def handle_endtag(self, tag: str) -> None:
        for index in range(len(self._open) - 1, -1, -1):
            if self._open[index][0].tag == tag:
                self._flush(self._open.pop(index))
                return

    def handle_data(self, data: str) -> None:
        for _, _, parts in self._open:
            parts.append(data)

    def parse_marked_section(self, i: int, report: int = 1) -> int:
        # html.parser asserts on unknown <![keyword[ sections; skip them to
        # the next ">" like a bogus comment so the scan carries on.
        try:
            return super().parse_marked_section(i, report)
        except AssertionError:
            end = self.rawdata.find(">", i + 3)
            if end < 0:
                return -1
            return end + 1

    def flush_open(self) -> None:
        while self._open:
            self._flush(self._open.pop())

    def _flush(self, pending: tuple[Element, list[FieldMatcher], list[str]]) -> None:
        element, matchers, parts = pending
        element.text = "".join(parts)
        self._extractor.dispatch(element, matchers)


class HTMLFieldExtractor:
    """Feeds HTML through one parse pass and fills `record` via `matchers`."""

    def __init__(self, matchers: Sequence[FieldMatcher], record: MetadataRecord) -> None:
        self.matchers = list(matchers)
        self.context = ExtractionContext(record=record)
        self._scanner = _ElementScanner(self)
        self._closed = False

    def matching(self, element: Element) -> list[FieldMatcher]:
        return [m for m in self.matchers if m.matches(element)]

    def dispatch(self, element: Element, matchers: Iterable[FieldMatcher]) -> None:
        for matcher in matchers:
            matcher.on_element(element, self.context)

    def feed(self, chunk: str) -> None:
        self._scanner.feed(chunk)

    def close(self) -> MetadataRecord:
        """Finish the scan; safe to call more than once."""
        if not self._closed:
            self._closed = True
            self._scanner.close()
            self._scanner.flush_open()
            for matcher in self.matchers:
                matcher.on_finish(self.context)
        return self.context.record


def extract_metadata(html: str, url: str) -> MetadataRecord:
    """Run the page matchers over a complete document."""
    record = MetadataRecord(url=url, domain=base_domain(url))
    extractor = HTMLFieldExtractor(page_matchers(), record)
    extractor.feed(html)
    return extractor.close()
