import re
from dataclasses import dataclass
from typing import Literal, Pattern

from src.lore.domain.types import ContentType

RuleField = Literal["title", "snippet", "combined"]


@dataclass(frozen=True)
class ContentTypeRule:
    rule_id: str
    target: ContentType
    field: RuleField
    pattern: Pattern[str]


# A result matches a content type when any row targeting that type matches.
CONTENT_TYPE_RULES: tuple[ContentTypeRule, ...] = (
    ContentTypeRule("characters_name", "characters", "combined", re.compile(r"character", re.I)),
    ContentTypeRule(
        "characters_titles",
        "characters",
        "snippet",
        re.compile(r"\b(lord|lady|king|queen|prince|princess|ser|knight)\b", re.I),
    ),
    ContentTypeRule("locations_name", "locations", "combined", re.compile(r"location", re.I)),
    ContentTypeRule("locations_settlement", "locations", "snippet", re.compile(r"city|kingdom", re.I)),
    ContentTypeRule(
        "locations_places",
        "locations",
        "snippet",
        re.compile(r"\b(castle|city|town|village|realm|kingdom)\b", re.I),
    ),
    ContentTypeRule("events_name", "events", "combined", re.compile(r"event", re.I)),
    ContentTypeRule("events_conflict", "events", "title", re.compile(r"battle|war", re.I)),
    ContentTypeRule("magic_name", "magic", "combined", re.compile(r"magic", re.I)),
    ContentTypeRule("magic_power", "magic", "snippet", re.compile(r"power", re.I)),
    ContentTypeRule(
        "magic_practice",
        "magic",
        "snippet",
        re.compile(r"\b(spell|enchant|magic|sorcery|wizard|mage)\b", re.I),
    ),
    ContentTypeRule("culture_name", "culture", "combined", re.compile(r"culture", re.I)),
    ContentTypeRule("culture_customs", "culture", "snippet", re.compile(r"tradition|religion", re.I)),
)

SPOILER_PATTERN: Pattern[str] = re.compile(
    r"\b(death|dies|killed|ending|finale|conclusion|spoiler)\b",
    re.I,
)

# Per-entity redaction uses a wider list than the aggregation-stage gate.
REDACTION_PATTERN: Pattern[str] = re.compile(
    r"\b(death|dies|killed|murder|betrayal|ending|finale|revelation|secret|twist|becomes|transforms)\b",
    re.I,
)
REDACTION_PLACEHOLDER = "[SPOILER]"

POTENTIAL_SPOILER_KEYWORDS: tuple[str, ...] = (
    "death",
    "dies",
    "killed",
    "ending",
    "finale",
    "revelation",
)

# Substrings that mark a search result as a likely character page.
CHARACTER_HINT_KEYWORDS: tuple[str, ...] = (
    "character",
    "protagonist",
    "lord",
    "lady",
    "king",
    "queen",
    "prince",
    "princess",
)
