"""
Quality policy evaluation
Decides whether a release quality is acceptable for a series and whether it
improves on what has already been acquired
"""

import logging

from .models import HistoryEntry, Quality, QualityProfile, QualityTier

logger = logging.getLogger(__name__)


def _tier(value: QualityTier | str) -> QualityTier:
    return value if isinstance(value, QualityTier) else QualityTier.from_name(value)


def make_profile(
    name: str,
    allowed,
    cutoff: QualityTier | str | None = None,
    minimum: QualityTier | str | None = None,
    allow_propers_below_minimum: bool = False,
) -> QualityProfile:
    """
    Build a QualityProfile from tiers or tier names

    Args:
        name: Profile name
        allowed: Iterable of QualityTier values or names
        cutoff: Tier at which upgrades stop (defaults to the best allowed tier)
        minimum: Lowest tier a non-proper is accepted at (defaults to the worst
            allowed tier)
        allow_propers_below_minimum: Accept propers of tiers below the minimum
            even when they are outside the allowed set
    """
    tiers = frozenset(_tier(t) for t in allowed)
    if not tiers:
        raise ValueError(f"Quality profile '{name}' allows no tiers")

    return QualityProfile(
        name=name,
        allowed=tiers,
        cutoff=max(tiers) if cutoff is None else _tier(cutoff),
        minimum=min(tiers) if minimum is None else _tier(minimum),
        allow_propers_below_minimum=allow_propers_below_minimum,
    )


class QualityPolicy:
    """
    Quality gate for releases

    Proper is treated as a modifier of a tier:
    - a proper of an allowed tier is always accepted
    - a non-proper is accepted only for an allowed tier at or above the minimum
    - a proper outside the allowed set is accepted only when the profile opts in
      and the tier is below the minimum

    The cutoff plays no part here; it only bounds upgrades.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)

    def accepts(self, profile: QualityProfile, quality: Quality) -> bool:
        if quality.tier in profile.allowed:
            return quality.is_proper or quality.tier >= profile.minimum

        if not quality.is_proper:
            return False

        if profile.allow_propers_below_minimum and quality.tier < profile.minimum:
            self.logger.debug(
                f"Accepting proper {quality.tier.label} below minimum of profile '{profile.name}'"
            )
            return True

        return False

    def is_upgrade(
        self,
        profile: QualityProfile,
        current: HistoryEntry | None,
        candidate: Quality,
    ) -> bool:
        """Whether candidate improves on the current acquisition"""
        if current is None:
            return True

        if candidate.tier == current.quality:
            # Propers of the held tier are always wanted
            return candidate.is_proper and not current.is_proper

        if candidate.tier < current.quality:
            return False

        return current.quality < profile.cutoff


def satisfies(entry: HistoryEntry, tier: QualityTier, is_proper: bool) -> bool:
    """Whether an acquired entry makes a candidate redundant"""
    if entry.quality != tier:
        return entry.quality > tier
    return entry.is_proper >= is_proper
