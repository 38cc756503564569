"""
Data models for the Comp Engine

Defines the property snapshot used for both subject and comps, the condition
scale every scorer depends on, and the derived scoring/validation/ARV records.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional


class Condition(Enum):
    """
    Ordered property condition scale.

    poor < fair < average < renovated < like_new
    """
    POOR = "poor"
    FAIR = "fair"
    AVERAGE = "average"
    RENOVATED = "renovated"
    LIKE_NEW = "like_new"

    @property
    def rank(self) -> int:
        """1-based position on the scale (poor=1, like_new=5)."""
        return _CONDITION_RANKS[self]

    def distance(self, other: "Condition") -> int:
        """Absolute rank distance between two conditions."""
        return abs(self.rank - other.rank)

    @classmethod
    def from_string(cls, value: str) -> "Condition":
        """Convert string to Condition, case-insensitive."""
        normalised = value.lower().strip().replace("-", "_").replace(" ", "_")
        for member in cls:
            if member.value == normalised:
                return member
        raise ValueError(f"Unknown condition: {value}")


_CONDITION_RANKS = {
    Condition.POOR: 1,
    Condition.FAIR: 2,
    Condition.AVERAGE: 3,
    Condition.RENOVATED: 4,
    Condition.LIKE_NEW: 5,
}


class TransactionType(Enum):
    """How a comp changed hands."""
    ARM_LENGTH = "arm_length"
    FAMILY_SALE = "family_sale"
    SHORT_SALE = "short_sale"
    BANK_OWNED = "bank_owned"


class PaymentMethod(Enum):
    """How a comp purchase was financed."""
    CASH = "cash"
    CONVENTIONAL = "conventional"
    FHA = "fha"
    VA = "va"


class MarketCondition(Enum):
    """Market temperature tag."""
    HOT = "hot"
    STABLE = "stable"
    COLD = "cold"


class InventoryLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DomTrend(Enum):
    """Days-on-market direction."""
    DECREASING = "decreasing"
    STABLE = "stable"
    INCREASING = "increasing"


def _coerce(enum_cls, value):
    """Accept either an enum member or its string value."""
    if value is None or isinstance(value, enum_cls):
        return value
    if enum_cls is Condition:
        return Condition.from_string(value)
    return enum_cls(str(value).lower().strip())


@dataclass(frozen=True)
class Property:
    """
    A real-estate parcel snapshot, used for the subject and for comps.

    Immutable: every engine reads these and returns new derived records.
    Sale attributes are only meaningful on comps.
    """
    address: str
    condition: Condition
    gla_sqft: float = 0.0
    beds: int = 0
    baths: float = 0.0
    property_type: str = "single_family"
    lot_sqft: Optional[float] = None
    year_built: Optional[int] = None

    # Sale attributes
    sale_price: Optional[float] = None
    adjusted_price: Optional[float] = None
    distance_miles: Optional[float] = None
    sale_date: Optional[date] = None
    transaction_type: Optional[TransactionType] = None
    payment_method: Optional[PaymentMethod] = None
    seller_concessions: float = 0.0
    condition_at_sale: Optional[Condition] = None
    condition_improvements: bool = False
    mls_id: str = ""
    county_record_id: str = ""

    # Geography
    zip_code: str = ""
    city: str = ""
    county: str = ""
    school_district: str = ""
    neighborhood: str = ""

    # Market state
    market_condition: Optional[MarketCondition] = None
    inventory_level: Optional[InventoryLevel] = None
    dom_trend: Optional[DomTrend] = None

    def __post_init__(self):
        """Normalise enum fields and validate counts."""
        for name, enum_cls in (
            ("condition", Condition),
            ("condition_at_sale", Condition),
            ("transaction_type", TransactionType),
            ("payment_method", PaymentMethod),
            ("market_condition", MarketCondition),
            ("inventory_level", InventoryLevel),
            ("dom_trend", DomTrend),
        ):
            object.__setattr__(self, name, _coerce(enum_cls, getattr(self, name)))

        if self.condition is None:
            raise ValueError("condition is required")
        if self.gla_sqft is not None and self.gla_sqft < 0:
            raise ValueError("gla_sqft must be non-negative")
        if self.beds < 0 or self.baths < 0:
            raise ValueError("beds and baths must be non-negative")

    @property
    def valuation_price(self) -> float:
        """Adjusted sale price, falling back to the raw sale price (0 if neither)."""
        if self.adjusted_price is not None:
            return self.adjusted_price
        return self.sale_price or 0.0


@dataclass
class ScoreBreakdown:
    """Per-factor sub-scores behind a composite comp score."""
    distance: float
    recency: float
    gla: float
    condition: float
    location: float
    property_type: float
    style: float
    wholesale_potential: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "distance": self.distance,
            "recency": self.recency,
            "gla": self.gla,
            "condition": self.condition,
            "location": self.location,
            "property_type": self.property_type,
            "style": self.style,
            "wholesale_potential": self.wholesale_potential,
        }


@dataclass
class CompScore:
    """Composite similarity of one comp to the subject, in [0, 1]."""
    comp: Property
    score: float
    breakdown: ScoreBreakdown


@dataclass
class ValidationResult:
    """
    Transaction-quality verdict for a single comp.

    The score is floored at 0 but has no upper clamp, so a clean cash sale
    scores 1.1.
    """
    comp: Property
    is_valid: bool
    validation_score: float
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class ARVResult:
    """
    After-repair value estimate.

    The range is derived from comp extremes independently of the point value,
    so it can be far wider than the +/-8% band around it.
    """
    value: int
    range_low: int
    range_high: int
    method: str
    weights_applied: Dict[str, float] = field(default_factory=dict)
    safety_margin: float = 0.95

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "value": self.value,
            "range_low": self.range_low,
            "range_high": self.range_high,
            "method": self.method,
            "weights_applied": dict(self.weights_applied),
            "safety_margin": self.safety_margin,
        }


@dataclass
class CompQualityMetrics:
    """Summary of how well a comp set matches the subject."""
    total_comps: int
    average_score: float
    average_condition_score: float
    top_comp_score: float
    bottom_comp_score: float

    @property
    def score_range(self) -> float:
        return self.top_comp_score - self.bottom_comp_score
