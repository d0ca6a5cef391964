from typing import Literal, get_args

LicenseTag = Literal["CC-BY-SA", "CC-BY", "Fair-Use"]
QualityTier = Literal["exceptional", "excellent", "very-good", "good"]
SpoilerLevel = Literal["none", "minimal", "moderate", "full"]
ContentType = Literal["characters", "locations", "events", "magic", "culture"]

LICENSE_TAGS: tuple[str, ...] = get_args(LicenseTag)
QUALITY_TIERS: tuple[str, ...] = get_args(QualityTier)
SPOILER_LEVELS: tuple[str, ...] = get_args(SpoilerLevel)
CONTENT_TYPES: tuple[str, ...] = get_args(ContentType)

# Higher rank sorts first.
QUALITY_RANK: dict[str, int] = {
    "exceptional": 4,
    "excellent": 3,
    "very-good": 2,
    "good": 1,
}

SPOILER_RANK: dict[str, int] = {
    "none": 0,
    "minimal": 1,
    "moderate": 2,
    "full": 3,
}
