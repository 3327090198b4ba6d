"""Rule table schemas - point bands, tier multipliers, level thresholds."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cams.utils.canonical import content_hash


class CertificationTier(str, Enum):
    """Vestas internal certification levels."""

    D = "D"
    C = "C"
    B = "B"
    A = "A"
    FIELD_TRAINER = "Field Trainer"


class Band(BaseModel):
    """One selectable option within a category."""

    model_config = ConfigDict(frozen=True)

    label: str
    key: str
    points: int


class LevelBand(BaseModel):
    """Lower bound of a competency level."""

    model_config = ConfigDict(frozen=True)

    min_points: int = Field(ge=0)
    level: int = Field(ge=1)
    title: str = ""
    description: str = ""


def _check_unique_keys(category: str, bands: tuple[Band, ...]) -> None:
    seen: set[str] = set()
    for band in bands:
        if band.key in seen:
            raise ValueError(f"Duplicate key in {category}: {band.key}")
        seen.add(band.key)


class RuleTable(BaseModel):
    """
    Versioned lookup tables for the competency matrix.
    Immutable once built; validation runs at construction.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    internal_experience: tuple[Band, ...] = ()
    external_experience: tuple[Band, ...] = ()
    education: tuple[Band, ...] = ()
    extra_courses: tuple[Band, ...] = ()
    tier_multipliers: dict[str, float]
    levels: tuple[LevelBand, ...]

    @model_validator(mode="after")
    def validate_tables(self) -> "RuleTable":
        for category in ("internal_experience", "external_experience", "education", "extra_courses"):
            _check_unique_keys(category, getattr(self, category))
        if not self.tier_multipliers:
            raise ValueError("At least one tier multiplier is required")
        if not any(band.min_points == 0 for band in self.levels):
            raise ValueError("Level bands must include a band starting at 0 points")
        level_numbers = [band.level for band in self.levels]
        if len(set(level_numbers)) != len(level_numbers):
            raise ValueError("Level numbers must be unique")
        thresholds = [band.min_points for band in self.levels]
        if len(set(thresholds)) != len(thresholds):
            raise ValueError("Level thresholds must be unique")
        return self

    @property
    def table_hash(self) -> str:
        """SHA256 of the table content, version label included."""
        return content_hash(self.model_dump(mode="json"))

    @property
    def lowest_multiplier(self) -> float:
        return min(self.tier_multipliers.values())

    @property
    def max_level(self) -> int:
        return max(band.level for band in self.levels)

    def level_band(self, level: int) -> LevelBand | None:
        for band in self.levels:
            if band.level == level:
                return band
        return None

    def label_for(self, category: str, key: str | None) -> str | None:
        """Label of `key` in `category`, None when the key is not in the table."""
        if key is None:
            return None
        for band in getattr(self, category):
            if band.key == key:
                return band.label
        return None


class LevelInfo(BaseModel):
    """GET /v1/levels item."""

    level: int
    title: str
    description: str
    point_range: str


class RuleTableResponse(BaseModel):
    """GET /v1/rules response."""

    version: str
    table_hash: str
    rules: RuleTable
