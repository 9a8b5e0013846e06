"""Configuration models used by the editing core.

ClipboardConfig

`parser` (`str`)
: BeautifulSoup tree builder used to parse pasted markup. ``html.parser``
  ships with Python; ``lxml`` or ``html5lib`` work when installed.

`markdown_paste` (`bool`)
: Render plain-text clipboard content as Markdown before conversion. When
  `False`, plain text is inserted verbatim.

`markdown_extensions` (`list[str]`)
: Python-Markdown extensions enabled for plain-text pastes.

`default_code_language` (`str`)
: Language stamped on pasted ``<pre>`` blocks whose code-block language is
  ``plain``.

`strip_tags` (`list[str]`)
: Tags removed from pasted markup before conversion (script noise).

`matchers` (`list[tuple[str, Callable]]`)
: Extra ``(selector, rule)`` pairs appended after the built-in rules.

KeyboardConfig

`platform` (`"mac" | "other" | None`)
: Platform used to resolve the ``shortKey`` alias. ``None`` detects the
  running interpreter's platform.

`firefox` (`bool`)
: Register the unconditional collapsed Backspace/Delete handlers instead of
  the prefix/suffix-gated ones.

`code_exit_blank_lines` (`int`)
: Number of trailing empty code-block lines that make Enter leave the block.

`bindings` (`dict[str, Any]`)
: Overrides of default bindings by name. ``False``/``None`` disables a
  default; a descriptor mapping replaces it; new names are appended.

EditorConfig

`read_only` (`bool`)
: Start the document disabled; pastes are then ignored.

`clipboard` / `keyboard`
: Nested module configuration.
"""

from __future__ import annotations

from collections.abc import Callable
import sys
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClipboardConfig(BaseModel):
    """Options controlling markup conversion and clipboard orchestration."""

    model_config = ConfigDict(extra="forbid")

    parser: str = "html.parser"
    markdown_paste: bool = True
    markdown_extensions: list[str] = Field(default_factory=lambda: ["fenced_code", "tables"])
    default_code_language: str = "javascript"
    strip_tags: list[str] = Field(default_factory=lambda: ["noscript"])
    matchers: list[tuple[str, Callable[..., Any]]] = Field(default_factory=list)

    @field_validator("strip_tags")
    @classmethod
    def _lower_tags(cls, value: list[str]) -> list[str]:
        return [tag.strip().lower() for tag in value if tag.strip()]


class KeyboardConfig(BaseModel):
    """Options controlling keyboard binding registration."""

    model_config = ConfigDict(extra="forbid")

    platform: Literal["mac", "other"] | None = None
    firefox: bool = False
    code_exit_blank_lines: int = Field(default=1, ge=1)
    bindings: dict[str, Any] = Field(default_factory=dict)

    def resolved_platform(self) -> Literal["mac", "other"]:
        """Return the configured platform, detecting it when unset."""
        if self.platform is not None:
            return self.platform
        return "mac" if sys.platform == "darwin" else "other"


class EditorConfig(BaseModel):
    """Top-level configuration for an editor instance."""

    model_config = ConfigDict(extra="forbid")

    read_only: bool = False
    clipboard: ClipboardConfig = Field(default_factory=ClipboardConfig)
    keyboard: KeyboardConfig = Field(default_factory=KeyboardConfig)


__all__ = ["ClipboardConfig", "EditorConfig", "KeyboardConfig"]
