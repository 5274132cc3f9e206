from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP

FULL_WINDOW_HOURS = 24
PARTIAL_WINDOW_HOURS = 2
FULL_WINDOW_RATE = Decimal('0.90')
PARTIAL_WINDOW_RATE = Decimal('0.50')

def departure_timestamp(journey_date: date, departure_time: time) -> datetime:
    return datetime.combine(journey_date, departure_time)

def hours_until_departure(departure_at: datetime, now: datetime) -> float:
    return (departure_at - now).total_seconds() / 3600

def calculate_refund_amount(departure_at: datetime, now: datetime, total_amount: Decimal) -> Decimal:
    """Refund owed when a booking is cancelled at `now`.

    More than 24 hours out refunds 90%, more than 2 hours refunds 50%,
    anything later (including after departure) refunds nothing.
    """
    hours = hours_until_departure(departure_at, now)
    total_amount = Decimal(total_amount)

    if hours > FULL_WINDOW_HOURS:
        rate = FULL_WINDOW_RATE
    elif hours > PARTIAL_WINDOW_HOURS:
        rate = PARTIAL_WINDOW_RATE
    else:
        return Decimal('0.00')

    return (total_amount * rate).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
