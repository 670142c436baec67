"""
Booking price calculations.

Pure functions: no database access and no side effects. Discounts are
resolved by ``app.services.discounts`` and passed in as numbers.

Route bookings:
    subtotal = seat price x seats, less the driver's subscription percent
    total    = subtotal - referral discount (never below 0)

Private hire:
    estimate = km/day allowance x rental days x price per km, less the
               subscription percent
    final    = max(actual km, min km/day x rental days) x price per km,
               less any referral discount recorded at creation
"""
import math

MS_PER_DAY = 86400000


def round_money(amount):
    return round(float(amount), 2)


def apply_percent_discount(amount, percent):
    """Take ``percent`` (0-100) off ``amount``"""
    if not percent:
        return float(amount)
    return float(amount) * (1 - (percent / 100.0))


def net_of_discount(amount, discount):
    """Subtract a flat discount, clamped so the result is never negative"""
    return round_money(max(float(amount) - float(discount or 0), 0.0))


def route_subtotal(seat_price, seats, subscription_percent=0):
    return apply_percent_discount(float(seat_price) * seats, subscription_percent)


def rental_days(start, end):
    """Whole days billed for a rental window, rounding partial days up"""
    if start is None or end is None:
        return 0
    elapsed_ms = (end - start).total_seconds() * 1000
    return max(0, math.ceil(elapsed_ms / MS_PER_DAY))


def estimate_private_base(price_per_km, start, end, km_per_day,
                          min_km_per_day=None, estimated_distance_km=None):
    """
    Pre-discount estimate for a private hire.

    Without a distance estimate the car is assumed to cover ``km_per_day``
    for every rental day (at least one). With one, the estimate is still
    held to the car's per-day minimum.
    """
    days = max(1, rental_days(start, end))
    if estimated_distance_km is None:
        distance = km_per_day * days
    else:
        distance = max(float(estimated_distance_km), (min_km_per_day or 0) * days)
    return float(price_per_km) * distance


def billable_distance(actual_distance_km, start, end, min_km_per_day=None):
    min_distance = (min_km_per_day or 0) * rental_days(start, end)
    return max(float(actual_distance_km), min_distance)


def final_private_price(price_per_km, actual_distance_km, start, end, min_km_per_day=None):
    """Distance-based price before any referral discount"""
    distance = billable_distance(actual_distance_km, start, end, min_km_per_day)
    return float(price_per_km) * distance
