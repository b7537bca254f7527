from .models import LoyaltyTier

# Lower bound of lifetime points for each tier, highest first.
TIER_THRESHOLDS = (
    (10000, LoyaltyTier.PLATINUM),
    (5000, LoyaltyTier.GOLD),
    (1000, LoyaltyTier.SILVER),
    (0, LoyaltyTier.BRONZE),
)


def calculate_tier(lifetime_points: int) -> str:
    for threshold, tier in TIER_THRESHOLDS:
        if lifetime_points >= threshold:
            return tier
    return LoyaltyTier.BRONZE
