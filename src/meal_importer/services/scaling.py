"""Scaling of per-100g nutrient profiles to gram quantities."""

from decimal import ROUND_HALF_UP, Decimal

from meal_importer.domain.nutrition import NUTRIENT_PRECISION, ForQuantity, Per100g


def scale_profile(profile: Per100g, grams: float) -> ForQuantity:
    """Scale a per-100g profile to the given quantity in grams."""
    if not isinstance(profile, Per100g):
        raise TypeError("scale_profile expects a Per100g profile")
    if grams <= 0:
        return ForQuantity()
    factor = grams / 100.0
    scaled = {
        name: round_nutrient(amount * factor, NUTRIENT_PRECISION[name])
        for name, amount in profile.as_dict().items()
    }
    return ForQuantity(**scaled)


def sum_profiles(profiles: list[ForQuantity]) -> ForQuantity:
    """Add up quantity profiles, keeping the per-nutrient precision."""
    totals = {name: 0.0 for name in NUTRIENT_PRECISION}
    for profile in profiles:
        for name, amount in profile.as_dict().items():
            totals[name] += amount
    return ForQuantity(
        **{
            name: round_nutrient(amount, NUTRIENT_PRECISION[name])
            for name, amount in totals.items()
        }
    )


def round_nutrient(value: float, places: int) -> float:
    """Round half-up to the given number of decimal places."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)
