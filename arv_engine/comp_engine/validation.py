"""
Comp Validation for the Comp Engine

Checks a comp's transaction metadata for factors that distort ARV:
- Short sales and condition drift (disqualifying-strength penalties)
- Family sales, seller concessions, post-listing improvements (warnings)
- Cash financing (small reliability bonus)
"""

from utils.formatting import format_currency
from utils.logging import get_logger

from .models import PaymentMethod, Property, TransactionType, ValidationResult

LOGGER = get_logger("comp_engine.validation")


# =============================================================================
# Configuration Constants
# =============================================================================

SHORT_SALE_PENALTY = 0.30
FAMILY_SALE_PENALTY = 0.20
SELLER_CONCESSION_PENALTY = 0.10
CONDITION_IMPROVEMENT_PENALTY = 0.15
CONDITION_CHANGE_PENALTY = 0.25
CASH_PAYMENT_BONUS = 0.10

VALIDITY_THRESHOLD = 0.6


class CompValidator:
    """
    Scores a comp's reliability from its transaction metadata.

    A comp is valid iff its score is >= 0.6. The score starts at 1.0,
    is floored at 0 and is not clamped above.
    """

    def validate(self, comp: Property) -> ValidationResult:
        """
        Validate a single comp.

        Args:
            comp: The comparable sale

        Returns:
            ValidationResult with verdict, score and notes
        """
        issues = []
        warnings = []
        recommendations = []
        score = 1.0

        if comp.transaction_type is TransactionType.SHORT_SALE:
            issues.append("Short sale - unreliable for valuation")
            score -= SHORT_SALE_PENALTY

        if comp.transaction_type is TransactionType.FAMILY_SALE:
            warnings.append("Family sale - may not reflect market value")
            score -= FAMILY_SALE_PENALTY

        if comp.payment_method is PaymentMethod.CASH:
            recommendations.append("Cash transaction - more reliable")
            score += CASH_PAYMENT_BONUS

        if comp.seller_concessions and comp.seller_concessions > 0:
            warnings.append(f"Seller concessions: {format_currency(comp.seller_concessions)}")
            score -= SELLER_CONCESSION_PENALTY

        if comp.condition_improvements:
            warnings.append("Property condition improved between listing and sale")
            score -= CONDITION_IMPROVEMENT_PENALTY

        if comp.condition_at_sale is not None and comp.condition_at_sale is not comp.condition:
            issues.append("Condition changed between listing and sale")
            score -= CONDITION_CHANGE_PENALTY

        # Rounded so threshold comparisons are not at the mercy of float noise
        score = round(max(0.0, score), 4)
        is_valid = score >= VALIDITY_THRESHOLD

        if not is_valid:
            LOGGER.debug(
                "comp rejected address=%s score=%.2f issues=%d",
                comp.address, score, len(issues),
            )

        return ValidationResult(
            comp=comp,
            is_valid=is_valid,
            validation_score=score,
            issues=issues,
            warnings=warnings,
            recommendations=recommendations,
        )
