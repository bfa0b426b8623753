"""
Rule matching strategies.

MatchType is a closed set; each member maps to one predicate here. Matching
is case-insensitive and ignores surrounding whitespace for every type.
REGEX uses search semantics, so a pattern may match anywhere in the text.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Pattern

from finledger.app.core.exceptions import ValidationError
from finledger.app.models.accounting_enums import MatchType
from finledger.app.models.classification_rule import ClassificationRule


def _normalize(text: Optional[str]) -> str:
    return (text or "").strip().casefold()


_PREDICATES: Dict[MatchType, Callable[[str, str], bool]] = {
    MatchType.CONTAINS: lambda text, value: value in text,
    MatchType.STARTS_WITH: lambda text, value: text.startswith(value),
    MatchType.ENDS_WITH: lambda text, value: text.endswith(value),
    MatchType.EQUALS: lambda text, value: text == value,
}


def compile_pattern(match_value: str) -> Pattern:
    """Compile a REGEX match value, raising ValidationError on bad syntax."""
    try:
        return re.compile(match_value.strip(), re.IGNORECASE)
    except re.error as e:
        raise ValidationError(
            f"Invalid regular expression '{match_value}': {e}",
            error_code="INVALID_RULE_PATTERN",
            details={"match_value": match_value}
        )


def validate_match(match_type: MatchType, match_value: Optional[str]) -> None:
    if match_type is None:
        raise ValidationError("Match type is required", error_code="INVALID_RULE")
    if match_value is None or not match_value.strip():
        raise ValidationError("Match value is required", error_code="INVALID_RULE")
    if match_type == MatchType.REGEX:
        compile_pattern(match_value)


@dataclass(frozen=True)
class RuleMatcher:
    """A rule prepared for repeated evaluation against descriptions."""

    rule_id: int
    rule_name: str
    account_id: int
    priority: int
    match_type: MatchType
    value: str
    pattern: Optional[Pattern] = None

    @classmethod
    def from_rule(cls, rule: ClassificationRule) -> "RuleMatcher":
        pattern = compile_pattern(rule.match_value) if rule.match_type == MatchType.REGEX else None
        return cls(
            rule_id=rule.id,
            rule_name=rule.rule_name,
            account_id=rule.account_id,
            priority=rule.priority,
            match_type=rule.match_type,
            value=_normalize(rule.match_value),
            pattern=pattern,
        )

    def matches(self, description: Optional[str]) -> bool:
        if self.match_type == MatchType.REGEX:
            return self.pattern.search((description or "").strip()) is not None
        return _PREDICATES[self.match_type](_normalize(description), self.value)


def order_rules(rules: Iterable[ClassificationRule]) -> List[ClassificationRule]:
    """Evaluation order: ascending priority, then ascending id."""
    return sorted(rules, key=lambda r: (r.priority, r.id))


def first_match(matchers: List[RuleMatcher], description: Optional[str]) -> Optional[RuleMatcher]:
    """Return the first matcher that accepts the description; matchers must already be ordered."""
    for matcher in matchers:
        if matcher.matches(description):
            return matcher
    return None
