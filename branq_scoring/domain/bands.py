"""Band classifier - threshold lookup from a numeric score to a qualitative label"""

from dataclasses import dataclass

from branq_scoring.domain.models import FactorBand

NO_DATA_LABEL = FactorBand.NO_DATA.value


@dataclass(frozen=True)
class BandThresholds:
    """
    Cut points for one consuming context.

    A score at or above ``excellent`` is Excellent, at or above ``good`` is
    Good, at or above ``fair`` gets ``fair_label`` (factor cards say
    "Moderate", the overall score says "Fair"), anything lower is Poor.
    """

    excellent: float
    good: float
    fair: float
    fair_label: str = "Fair"


# Factor cards and the overall 0-100 score share cut points but not wording
FACTOR_BANDS = BandThresholds(excellent=90, good=70, fair=40, fair_label=FactorBand.MODERATE.value)
OVERALL_BANDS = BandThresholds(excellent=90, good=70, fair=40)

# Same cut points projected onto the 300-850 display scale
CREDIT_BANDS = BandThresholds(excellent=795, good=685, fair=520)


def classify(score: float, thresholds: BandThresholds) -> str:
    if score >= thresholds.excellent:
        return FactorBand.EXCELLENT.value
    if score >= thresholds.good:
        return FactorBand.GOOD.value
    if score >= thresholds.fair:
        return thresholds.fair_label
    return FactorBand.POOR.value


def factor_band(value: int) -> FactorBand:
    return FactorBand(classify(value, FACTOR_BANDS))
