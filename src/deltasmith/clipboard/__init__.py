"""Clipboard conversion and orchestration."""

from __future__ import annotations

from .attributes import AttributeResolver
from .clipboard import Clipboard, ClipboardData, ClipboardEvent, LoggingUploader, Uploader
from .markdown import html_to_markdown, markdown_to_html
from .matchers import CLIPBOARD_CONFIG
from .pipeline import MatcherPipeline
from .rules import ELEMENT_NODE, TEXT_NODE, ConversionContext, MatcherRegistry


__all__ = [
    "CLIPBOARD_CONFIG",
    "ELEMENT_NODE",
    "TEXT_NODE",
    "AttributeResolver",
    "Clipboard",
    "ClipboardData",
    "ClipboardEvent",
    "ConversionContext",
    "LoggingUploader",
    "MatcherPipeline",
    "MatcherRegistry",
    "Uploader",
    "html_to_markdown",
    "markdown_to_html",
]
