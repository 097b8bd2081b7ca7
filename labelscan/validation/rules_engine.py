"""Review rules for extracted receiving fields.

Checks extracted values against their expected syntax, lists the
fields the operator still has to type in, and flags entries that
duplicate one already received (same item number and barcode).
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from labelscan.extraction.barcode import is_canonical_barcode
from labelscan.extraction.field_extractor import ExtractedFields
from labelscan.utils.logger import get_logger

logger = get_logger(__name__)

_DIGITS_RE = re.compile(r"[0-9]+")


@dataclass
class ReviewResult:
    """Result of a single field check."""

    field_name: str
    is_valid: bool
    message: str
    rule_name: str


@dataclass
class ReviewReport:
    """Aggregated review of one extraction."""

    all_valid: bool
    results: list[ReviewResult]
    missing_fields: list[str] = field(default_factory=list)
    duplicate: bool = False
    warnings: list[str] = field(default_factory=list)


def _entry_value(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def is_duplicate(fields: ExtractedFields, existing: Iterable[Any]) -> bool:
    """Check whether an entry with the same item number and barcode exists.

    Both keys must be present on the new fields; a partial scan is never
    reported as a duplicate.

    Args:
        fields: Newly extracted fields.
        existing: Previously received entries, as ``ExtractedFields``
            or mappings with ``item_number`` and ``barcode`` keys.

    Returns:
        ``True`` if a matching entry exists.
    """
    if fields.item_number is None or fields.barcode is None:
        return False
    return any(
        _entry_value(entry, "item_number") == fields.item_number
        and _entry_value(entry, "barcode") == fields.barcode
        for entry in existing
    )


class RulesEngine:
    """Configurable review rules for extracted fields.

    Rules are grouped into named profiles loaded from a YAML file.

    Args:
        rules_path: Path to the review rules YAML file.
    """

    def __init__(
        self, rules_path: Path = Path("configs/validation_rules.yaml")
    ) -> None:
        self.rules = self._load_rules(rules_path)
        self._validators: dict[str, Any] = {
            "required": self._validate_required,
            "digits": self._validate_digits,
            "barcode_format": self._validate_barcode,
            "non_negative": self._validate_non_negative,
            "max_value": self._validate_max_value,
            "regex": self._validate_regex,
        }

    def _load_rules(self, path: Path) -> dict:
        """Load review rules from a YAML file.

        Args:
            path: Path to the rules file.

        Returns:
            Dictionary of profile-specific rules.
        """
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f)
                if data:
                    logger.info("Loaded review rules from %s", path)
                    return data
        logger.debug("Using default review rules")
        return self._default_rules()

    def _default_rules(self) -> dict:
        return {
            "receiving": {
                "item_number": [{"type": "required"}, {"type": "digits"}],
                "barcode": [{"type": "required"}, {"type": "barcode_format"}],
                "quantity": [{"type": "required"}, {"type": "non_negative"}],
            },
        }

    def review(
        self,
        fields: ExtractedFields,
        profile: str = "receiving",
        existing: Iterable[Any] | None = None,
    ) -> ReviewReport:
        """Review extracted fields against a rules profile.

        Args:
            fields: Output of the field extractor.
            profile: Name of the rules profile to apply.
            existing: Previously received entries for duplicate detection.

        Returns:
            Review report with per-rule results and missing fields.
        """
        results: list[ReviewResult] = []
        warnings: list[str] = []

        profile_rules = self.rules.get(profile)
        if profile_rules is None:
            warnings.append(f"Unknown profile: {profile}")
            profile_rules = {}

        for field_name, rules in profile_rules.items():
            value = getattr(fields, field_name, None)

            for rule in rules or []:
                rule_type = rule.get("type")
                validator = self._validators.get(rule_type)

                if not validator:
                    warnings.append(f"Unknown rule type: {rule_type}")
                    continue

                results.append(validator(field_name, value, rule))

        duplicate = is_duplicate(fields, existing or [])
        if duplicate:
            warnings.append(
                "Entry duplicates an existing item number and barcode"
            )

        all_valid = all(r.is_valid for r in results)
        logger.info(
            "Review for %s: %s (%d checks)",
            profile,
            "PASSED" if all_valid else "FAILED",
            len(results),
        )

        return ReviewReport(
            all_valid=all_valid,
            results=results,
            missing_fields=fields.missing_fields(),
            duplicate=duplicate,
            warnings=warnings,
        )

    def _validate_required(
        self, field_name: str, value: Any, rule: dict
    ) -> ReviewResult:
        """Check that a field was extracted."""
        if value is not None and str(value).strip():
            return ReviewResult(field_name, True, "Required field present", "required")
        return ReviewResult(
            field_name,
            False,
            f"Required field missing, enter manually: {field_name}",
            "required",
        )

    def _validate_digits(
        self, field_name: str, value: Any, rule: dict
    ) -> ReviewResult:
        """Check that a value consists of ASCII digits 0-9 only."""
        if value is None:
            return ReviewResult(field_name, True, "No value to validate", "digits")
        if _DIGITS_RE.fullmatch(str(value)):
            return ReviewResult(field_name, True, "Digits only", "digits")
        return ReviewResult(
            field_name, False, f"Expected digits only: {value}", "digits"
        )

    def _validate_barcode(
        self, field_name: str, value: Any, rule: dict
    ) -> ReviewResult:
        """Check that a barcode is in canonical hyphenated form."""
        if value is None:
            return ReviewResult(
                field_name, True, "No value to validate", "barcode_format"
            )
        if is_canonical_barcode(str(value)):
            return ReviewResult(
                field_name, True, "Canonical barcode", "barcode_format"
            )
        return ReviewResult(
            field_name, False, f"Invalid barcode: {value}", "barcode_format"
        )

    def _validate_non_negative(
        self, field_name: str, value: Any, rule: dict
    ) -> ReviewResult:
        """Check that a count is a non-negative integer."""
        if value is None:
            return ReviewResult(
                field_name, True, "No value to validate", "non_negative"
            )
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return ReviewResult(
                field_name, True, f"Valid count: {value}", "non_negative"
            )
        return ReviewResult(
            field_name,
            False,
            f"Count must be a non-negative integer: {value}",
            "non_negative",
        )

    def _validate_max_value(
        self, field_name: str, value: Any, rule: dict
    ) -> ReviewResult:
        """Flag counts above a plausible ceiling, usually OCR misreads."""
        if value is None:
            return ReviewResult(field_name, True, "No value to validate", "max_value")

        try:
            limit = int(rule.get("max", 100000))
            if int(value) <= limit:
                return ReviewResult(field_name, True, "Within limit", "max_value")
            return ReviewResult(
                field_name,
                False,
                f"Value {value} exceeds limit {limit}",
                "max_value",
            )
        except (TypeError, ValueError):
            return ReviewResult(
                field_name, False, f"Invalid number: {value}", "max_value"
            )

    def _validate_regex(
        self, field_name: str, value: Any, rule: dict
    ) -> ReviewResult:
        """Validate a field value against a custom regex pattern."""
        if value is None:
            return ReviewResult(field_name, True, "No value to validate", "regex")

        pattern = rule.get("pattern", "")
        if re.match(pattern, str(value)):
            return ReviewResult(field_name, True, "Matches pattern", "regex")
        return ReviewResult(
            field_name,
            False,
            f"Does not match pattern: {pattern}",
            "regex",
        )
