"""
Razorpay Commission
Gateway fee deducted from every captured payment
"""

from typing import Iterable

from app.config import settings


def _round(amount: float) -> float:
    return round(float(amount) + 1e-9, 2)


def calculate_commission(amount: float, rate: float = None) -> float:
    """Gateway commission for a gross amount (rupees)"""
    rate = settings.RAZORPAY_COMMISSION_RATE if rate is None else rate
    return _round((amount or 0) * rate)


def calculate_net_revenue(amount: float, rate: float = None) -> float:
    """Gross amount minus the gateway commission"""
    return _round((amount or 0) - calculate_commission(amount, rate))


def calculate_bulk_commission(amounts: Iterable[float], rate: float = None) -> dict:
    """Totals across many payments"""
    amounts = [float(a or 0) for a in amounts]
    total_gross = _round(sum(amounts))
    total_commission = _round(sum(calculate_commission(a, rate) for a in amounts))
    return {
        "total_gross": total_gross,
        "total_commission": total_commission,
        "total_net": _round(total_gross - total_commission),
    }
