"""
Comp Admissibility Filters for the Comp Engine

A comp is admissible for valuation only if it passes ALL of:
1. Category exclusions (renovated vs fair subject, like_new vs poor subject)
2. Condition-rank distance <= 2
3. CompValidator verdict is valid
4. Not a short sale
5. No post-listing condition improvement

The predicates are independent and side-effect free, so order does not matter
and filtering an already-filtered set returns it unchanged.
"""

from typing import Iterable, List, Optional

from utils.logging import get_logger

from .models import Condition, Property, TransactionType
from .validation import CompValidator

LOGGER = get_logger("comp_engine.filters")


# =============================================================================
# Configuration Constants
# =============================================================================

MAX_CONDITION_DISTANCE = 2

# (comp condition, subject condition) pairs that are never comparable
EXCLUDED_CONDITION_PAIRS = {
    (Condition.RENOVATED, Condition.FAIR),
    (Condition.LIKE_NEW, Condition.POOR),
}


class CompFilter:
    """
    Selects the comps that may feed an ARV calculation.
    """

    def __init__(self, validator: Optional[CompValidator] = None):
        """
        Initialize filter.

        Args:
            validator: Transaction-quality validator (default: CompValidator())
        """
        self._validator = validator or CompValidator()

    def filter_for_valuation(
        self,
        comps: Iterable[Property],
        subject: Property,
    ) -> List[Property]:
        """
        Filter candidates down to admissible comps, preserving input order.

        Args:
            comps: Candidate comparable sales
            subject: The property being valued

        Returns:
            List of admissible comps
        """
        candidates = list(comps)
        admissible = [c for c in candidates if self.is_admissible(c, subject)]

        excluded = len(candidates) - len(admissible)
        if excluded:
            LOGGER.debug(
                "excluded %d of %d comps for subject=%s",
                excluded, len(candidates), subject.address,
            )
        return admissible

    def is_admissible(self, comp: Property, subject: Property) -> bool:
        """Check every admissibility rule for one comp."""
        return (
            self.passes_category_exclusion(comp, subject)
            and self.passes_condition_distance(comp, subject)
            and self._validator.validate(comp).is_valid
            and comp.transaction_type is not TransactionType.SHORT_SALE
            and not comp.condition_improvements
        )

    @staticmethod
    def passes_category_exclusion(comp: Property, subject: Property) -> bool:
        return (comp.condition, subject.condition) not in EXCLUDED_CONDITION_PAIRS

    @staticmethod
    def passes_condition_distance(comp: Property, subject: Property) -> bool:
        return comp.condition.distance(subject.condition) <= MAX_CONDITION_DISTANCE
