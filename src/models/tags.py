"""
Tag delimiter model

Declares the three delimiter pairs that mark the regions of a template
needing compilation, and builds the regular expressions used by the
compile stages to find them.
"""

import re
from dataclasses import dataclass
from typing import Any, Tuple


Delimiters = Tuple[str, str]


@dataclass(frozen=True)
class TagSet:
    """
    Delimiter pairs recognized by the compiler

    Attributes:
        content: (open, close) of an echo tag, e.g. ("{{", "}}")
        directive: (open, close) of a directive tag, e.g. ("{@", "}")
        comment: (open, close) of a comment tag, e.g. ("{{--", "--}}")

    The comment pattern is always applied before the other two, so a
    comment opener that also starts with the content opener is safe.
    """
    content: Delimiters = ("{{", "}}")
    directive: Delimiters = ("{@", "}")
    comment: Delimiters = ("{{--", "--}}")

    @classmethod
    def from_settings(cls, settings: Any) -> "TagSet":
        """Build a TagSet from an AppSettings instance"""
        return cls(
            content=(settings.content_tag_open, settings.content_tag_close),
            directive=(settings.directive_tag_open, settings.directive_tag_close),
            comment=(settings.comment_tag_open, settings.comment_tag_close),
        )

    def comment_pattern(self) -> "re.Pattern[str]":
        """Non-greedy comment region, may span lines"""
        opener, closer = (re.escape(d) for d in self.comment)
        return re.compile(rf"{opener}\s*.*?\s*{closer}", re.S)

    def directive_pattern(self) -> "re.Pattern[str]":
        """Directive region: group 1 is the name, group 2 the optional arguments"""
        opener, closer = (re.escape(d) for d in self.directive)
        return re.compile(rf"{opener}(.+?)(?::(.+?))?{closer}", re.S)

    def content_pattern(self) -> "re.Pattern[str]":
        """Echo region: group 1 is the expression with surrounding blanks trimmed"""
        opener, closer = (re.escape(d) for d in self.content)
        return re.compile(rf"{opener}\s*(.+?)\s*{closer}", re.S)
