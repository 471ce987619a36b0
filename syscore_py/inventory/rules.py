"""
Classification filter for Syscore.

The accept/reject heuristics for names and install locations are kept as a
versioned table of rules rather than inline conditionals. Extra rules can be
supplied from the configuration file.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from syscore_py.inventory import CandidateRecord, SourceKind

logger = logging.getLogger("syscore.rules")

RULES_VERSION = 2


class RuleField(Enum):
    NAME = "name"
    INSTALL_LOCATION = "install_location"


class RuleMatch(Enum):
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"
    REGEX = "regex"


class RuleAction(Enum):
    REJECT = "reject"
    ALLOW = "allow"


@dataclass(frozen=True)
class FilterRule:
    """
    A single case-insensitive (field, pattern, action) rule.

    A rule with a ``source`` only applies to records from that source kind.
    """

    field: RuleField
    match: RuleMatch
    pattern: str
    action: RuleAction = RuleAction.REJECT
    source: Optional[SourceKind] = None

    def matches(self, record: CandidateRecord) -> bool:
        if self.source is not None and record.source is not self.source:
            return False
        value = (getattr(record, self.field.value) or "").lower()
        if not value:
            return False
        pattern = self.pattern.lower()
        if self.match is RuleMatch.CONTAINS:
            return pattern in value
        if self.match is RuleMatch.STARTSWITH:
            return value.startswith(pattern)
        if self.match is RuleMatch.ENDSWITH:
            return value.endswith(pattern)
        return re.search(self.pattern, value, re.IGNORECASE) is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterRule":
        """
        Create a FilterRule from a dictionary.

        Raises:
            ValueError: If a key is missing or holds an unknown value.
        """
        try:
            rule = cls(
                field=RuleField(data["field"]),
                match=RuleMatch(data.get("match", "contains")),
                pattern=str(data["pattern"]),
                action=RuleAction(data.get("action", "reject")),
                source=SourceKind(data["source"]) if data.get("source") else None,
            )
        except KeyError as e:
            raise ValueError(f"Filter rule is missing {e}") from e
        if rule.match is RuleMatch.REGEX:
            try:
                re.compile(rule.pattern)
            except re.error as e:
                raise ValueError(f"Invalid regex {rule.pattern!r}: {e}") from e
        return rule


def _reject(
    field: RuleField,
    match: RuleMatch,
    pattern: str,
    source: Optional[SourceKind] = None,
) -> FilterRule:
    return FilterRule(field, match, pattern, RuleAction.REJECT, source)


_NAME = RuleField.NAME
_LOCATION = RuleField.INSTALL_LOCATION

DEFAULT_RULES: Tuple[FilterRule, ...] = (
    # Updates and patches
    _reject(_NAME, RuleMatch.CONTAINS, "update for"),
    _reject(_NAME, RuleMatch.CONTAINS, "security update"),
    _reject(_NAME, RuleMatch.CONTAINS, "hotfix"),
    _reject(_NAME, RuleMatch.REGEX, r"^microsoft .*update"),
    # Uninstallers and maintenance tools
    _reject(_NAME, RuleMatch.CONTAINS, "uninstall"),
    _reject(_NAME, RuleMatch.CONTAINS, "maintenance service"),
    _reject(_NAME, RuleMatch.ENDSWITH, " uninstaller"),
    # Shortcuts to "Remove ..." tools; registry names like "Malware Remover" stay.
    _reject(_NAME, RuleMatch.CONTAINS, "remove", SourceKind.START_MENU_SHORTCUT),
    _reject(_LOCATION, RuleMatch.CONTAINS, "uninstall"),
    _reject(_LOCATION, RuleMatch.CONTAINS, "maintenance service"),
    _reject(_LOCATION, RuleMatch.ENDSWITH, "uninstall.exe"),
    _reject(_LOCATION, RuleMatch.ENDSWITH, "unins000.exe"),
)


class RuleSet:
    """Ordered rule table; the first matching rule decides."""

    def __init__(
        self,
        rules: Optional[Iterable[FilterRule]] = None,
        version: int = RULES_VERSION,
    ):
        self.rules: List[FilterRule] = list(DEFAULT_RULES if rules is None else rules)
        self.version = version

    @classmethod
    def with_extra(cls, extra: Iterable[FilterRule]) -> "RuleSet":
        """
        Default rules with *extra* rules placed first, so configured ``allow``
        rules can override a built-in rejection.
        """
        return cls(list(extra) + list(DEFAULT_RULES))

    def first_match(self, record: CandidateRecord) -> Optional[FilterRule]:
        for rule in self.rules:
            if rule.matches(record):
                return rule
        return None

    def accepts(self, record: CandidateRecord) -> bool:
        rule = self.first_match(record)
        if rule is None or rule.action is RuleAction.ALLOW:
            return True
        logger.debug(
            f"Filtered {record.name!r} from {record.source.label}: "
            f"{rule.field.value} {rule.match.value} {rule.pattern!r}"
        )
        return False
