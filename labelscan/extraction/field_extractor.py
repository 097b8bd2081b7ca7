"""Field extraction for warehouse receiving labels.

Turns loosely formatted OCR text into an item number, a canonical
barcode and a unit count. Extraction runs in two passes:

1. A line pass that matches each stripped line on its own. The first
   line that yields a field wins that field.
2. A joined pass over the whole text with line breaks and whitespace
   runs collapsed to single spaces. It only looks for fields the line
   pass left unset, which recovers markers and values split across
   lines by the OCR step.

A missing field is a normal outcome and is left as ``None``.
"""

import re
from collections.abc import Callable
from dataclasses import asdict, dataclass

from labelscan.utils.config import ExtractionConfig
from labelscan.utils.logger import get_logger, make_match_logger

from .barcode import BARCODE_PATTERNS, normalize_barcode

logger = get_logger(__name__)

FIELD_ORDER: tuple[str, ...] = ("quantity", "item_number", "barcode")

LINE_PASS = "line"
JOINED_PASS = "joined"

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractedFields:
    """Structured fields recovered from a label. ``None`` means not found."""

    item_number: str | None = None
    barcode: str | None = None
    quantity: int | None = None

    def to_dict(self) -> dict[str, str | int]:
        """Return only the fields that were found."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def missing_fields(self) -> list[str]:
        """List the names of absent fields in extraction order."""
        return [name for name in FIELD_ORDER if getattr(self, name) is None]

    @property
    def is_empty(self) -> bool:
        return len(self.missing_fields()) == len(FIELD_ORDER)


@dataclass(frozen=True)
class MatchEvent:
    """Diagnostic record emitted each time a field is set."""

    field_name: str
    value: str | int
    pass_name: str
    pattern: str
    line_number: int | None = None


DiagnosticSink = Callable[[MatchEvent], None]


@dataclass(frozen=True)
class FieldPattern:
    """One entry of the extraction table.

    ``normalize`` receives the match object and returns the field value.
    ``mode`` is ``"loose"`` for entries used only with permissive item
    matching, ``"strict"`` for their replacements, ``"any"`` otherwise.
    """

    field_name: str
    label: str
    pattern: re.Pattern[str]
    normalize: Callable[[re.Match[str]], str | int]
    mode: str = "any"


def _digits(match: re.Match[str]) -> str:
    return match.group(1)


def _count(match: re.Match[str]) -> int:
    return int(match.group(1), 10)


def _barcode(match: re.Match[str]) -> str:
    return normalize_barcode(match.group(0))


def _compile(regex: str) -> re.Pattern[str]:
    return re.compile(regex, re.IGNORECASE | re.ASCII)


_BARCODE_ENTRIES: tuple[FieldPattern, ...] = tuple(
    FieldPattern("barcode", label, pattern, _barcode)
    for label, pattern in BARCODE_PATTERNS
)

# Line pass: the short markers must fill the whole line.
LINE_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern("quantity", "units_marker", _compile(r"^#U:\s*(\d+)$"), _count),
    FieldPattern(
        "quantity", "units_phrase", _compile(r"#\s*of\s*units\s*:\s*(\d+)"), _count
    ),
    FieldPattern("item_number", "i_marker", _compile(r"^I:\s*(\d+)$"), _digits),
    FieldPattern(
        "item_number", "item_marker", _compile(r"^Item\s*:\s*(\d+)$"), _digits
    ),
    FieldPattern(
        "item_number",
        "item_loose",
        _compile(r"item\s*:\s*(\d+)"),
        _digits,
        "loose",
    ),
    *_BARCODE_ENTRIES,
)

# Joined pass: no anchors. Strict item matching requires a word start.
JOINED_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern("quantity", "units_marker", _compile(r"#U:\s*(\d+)"), _count),
    FieldPattern(
        "quantity", "units_phrase", _compile(r"#\s*of\s*units\s*:\s*(\d+)"), _count
    ),
    FieldPattern(
        "item_number", "i_marker", _compile(r"I:\s*(\d+)"), _digits, "loose"
    ),
    FieldPattern(
        "item_number", "i_marker", _compile(r"\bI:\s*(\d+)"), _digits, "strict"
    ),
    FieldPattern(
        "item_number", "item_marker", _compile(r"Item\s*:\s*(\d+)"), _digits, "loose"
    ),
    FieldPattern(
        "item_number",
        "item_marker",
        _compile(r"\bItem\s*:\s*(\d+)"),
        _digits,
        "strict",
    ),
    FieldPattern(
        "item_number",
        "item_loose",
        _compile(r"item\s*:\s*(\d+)"),
        _digits,
        "loose",
    ),
    *_BARCODE_ENTRIES,
)


class FieldExtractor:
    """Table-driven extractor for receiving label text.

    Args:
        fallback_enabled: Run the joined-text pass for fields the line
            pass missed.
        loose_item_pattern: Permissive item matching. The unanchored
            ``item:`` pattern can fire inside unrelated words containing
            "item" but recovers item numbers from noisy OCR lines. When
            off, that pattern is dropped and the joined-pass ``I:`` and
            ``Item:`` markers must start a word.
        on_match: Optional diagnostic sink called for every field set.
    """

    def __init__(
        self,
        fallback_enabled: bool = True,
        loose_item_pattern: bool = True,
        on_match: DiagnosticSink | None = None,
    ) -> None:
        self.fallback_enabled = fallback_enabled
        self.loose_item_pattern = loose_item_pattern
        self.on_match = on_match
        self.line_patterns = self._select(LINE_PATTERNS)
        self.joined_patterns = self._select(JOINED_PATTERNS)

    @classmethod
    def from_config(
        cls, config: ExtractionConfig, on_match: DiagnosticSink | None = None
    ) -> "FieldExtractor":
        """Build an extractor from the extraction section of the app config.

        When ``trace_matches`` is set and no sink is given, matches are
        written to this module's logger at DEBUG level.
        """
        if on_match is None and config.trace_matches:
            on_match = make_match_logger(logger)
        return cls(
            fallback_enabled=config.fallback_enabled,
            loose_item_pattern=config.loose_item_pattern,
            on_match=on_match,
        )

    def _select(
        self, table: tuple[FieldPattern, ...]
    ) -> dict[str, list[FieldPattern]]:
        """Group a pattern table by field, keeping priority order."""
        skipped = "strict" if self.loose_item_pattern else "loose"
        grouped: dict[str, list[FieldPattern]] = {name: [] for name in FIELD_ORDER}
        for entry in table:
            if entry.mode == skipped:
                continue
            grouped[entry.field_name].append(entry)
        return grouped

    def extract(self, text: str) -> ExtractedFields:
        """Extract receiving fields from OCR text.

        Args:
            text: Raw OCR output, possibly spanning many lines.

        Returns:
            The fields that could be recovered; absent ones are ``None``.

        Raises:
            TypeError: If ``text`` is not a string.
        """
        if not isinstance(text, str):
            raise TypeError(f"text must be str, not {type(text).__name__}")

        found: dict[str, str | int] = {}

        # Only "\n" separates lines; a trailing "\r" is removed by strip().
        for line_number, line in enumerate(text.split("\n"), 1):
            if len(found) == len(FIELD_ORDER):
                break
            self._match_fields(
                line.strip(), self.line_patterns, found, LINE_PASS, line_number
            )

        if self.fallback_enabled and len(found) < len(FIELD_ORDER):
            joined = _WHITESPACE_RE.sub(" ", text)
            self._match_fields(joined, self.joined_patterns, found, JOINED_PASS)

        result = ExtractedFields(**found)
        logger.debug("Extracted fields: %s", result.to_dict())
        return result

    def _match_fields(
        self,
        text: str,
        patterns: dict[str, list[FieldPattern]],
        found: dict[str, str | int],
        pass_name: str,
        line_number: int | None = None,
    ) -> None:
        """Fill every field still missing from ``found`` using ``text``."""
        for field_name in FIELD_ORDER:
            if field_name in found:
                continue
            for entry in patterns[field_name]:
                match = entry.pattern.search(text)
                if match is None:
                    continue
                value = entry.normalize(match)
                found[field_name] = value
                if self.on_match is not None:
                    self.on_match(
                        MatchEvent(
                            field_name, value, pass_name, entry.label, line_number
                        )
                    )
                break

    def pattern_labels(self) -> dict[str, list[str]]:
        """Return the active line-pass pattern labels per field."""
        return {
            name: [entry.label for entry in entries]
            for name, entries in self.line_patterns.items()
        }


def extract_fields(
    text: str, on_match: DiagnosticSink | None = None
) -> ExtractedFields:
    """Extract receiving fields with the default pattern set.

    Args:
        text: Raw OCR output.
        on_match: Optional diagnostic sink called for every field set.

    Returns:
        The recovered fields.
    """
    return FieldExtractor(on_match=on_match).extract(text)
