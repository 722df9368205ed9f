"""
Tier engine: maps a point balance to a reward tier.

Pure computation over the ``REWARDS_TIERS`` setting. Nothing here touches
the database; the tier is never stored, it is recomputed on every read.
"""
from dataclasses import dataclass, field

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@dataclass(frozen=True)
class Tier:
    """A named band of balances, starting at ``threshold`` inclusive"""
    name: str
    display_name: str
    threshold: int
    discount_percent: int = 0
    benefits: tuple = field(default_factory=tuple)

    def to_dict(self):
        return {
            'name': self.name,
            'display_name': self.display_name,
            'threshold': self.threshold,
            'discount_percent': self.discount_percent,
            'benefits': list(self.benefits),
        }


class TierEngine:
    """Tier lookups against the configured, ordered tier table"""

    @staticmethod
    def get_tiers():
        """
        Load and validate the tier table.

        Raises ImproperlyConfigured if the table is empty, does not start
        at 0, or its thresholds are not strictly increasing.
        """
        raw_tiers = getattr(settings, 'REWARDS_TIERS', None)
        if not raw_tiers:
            raise ImproperlyConfigured("REWARDS_TIERS must define at least one tier")

        tiers = tuple(
            Tier(
                name=entry['name'],
                display_name=entry.get('display_name', entry['name'].title()),
                threshold=int(entry['threshold']),
                discount_percent=entry.get('discount_percent', 0),
                benefits=tuple(entry.get('benefits', ())),
            )
            for entry in raw_tiers
        )

        if tiers[0].threshold != 0:
            raise ImproperlyConfigured("The lowest reward tier must start at 0 points")
        for lower, upper in zip(tiers, tiers[1:]):
            if upper.threshold <= lower.threshold:
                raise ImproperlyConfigured(
                    f"Reward tier thresholds must be strictly increasing "
                    f"({lower.name}={lower.threshold}, {upper.name}={upper.threshold})"
                )
        return tiers

    @staticmethod
    def _index_for(points, tiers):
        index = 0
        for position, tier in enumerate(tiers):
            if tier.threshold <= points:
                index = position
            else:
                break
        return index

    @staticmethod
    def tier_for(points):
        """Highest tier whose threshold does not exceed ``points``"""
        tiers = TierEngine.get_tiers()
        return tiers[TierEngine._index_for(points, tiers)]

    @staticmethod
    def next_tier(points):
        """Tier immediately above the current one, or None at the top"""
        tiers = TierEngine.get_tiers()
        index = TierEngine._index_for(points, tiers)
        if index + 1 < len(tiers):
            return tiers[index + 1]
        return None

    @staticmethod
    def progress_to_next(points):
        """Percentage of the way from the current tier to the next, in [0, 100]"""
        current = TierEngine.tier_for(points)
        upcoming = TierEngine.next_tier(points)
        if upcoming is None:
            return 100.0

        span = upcoming.threshold - current.threshold
        progress = (points - current.threshold) / span * 100
        return round(min(max(progress, 0.0), 100.0), 2)

    @staticmethod
    def points_to_next(points):
        """Points still needed for the next tier; 0 at the top tier"""
        upcoming = TierEngine.next_tier(points)
        if upcoming is None:
            return 0
        return max(upcoming.threshold - points, 0)

    @staticmethod
    def discount_for(points):
        """Booking discount percentage granted at this balance"""
        return TierEngine.tier_for(points).discount_percent
