"""Mortgage amortization in integer cents."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from dateutil.relativedelta import relativedelta

from finledger.domain.entities import AmortizationRow, MortgageCalculation
from finledger.domain.errors import ValidationError


def _round_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def monthly_payment(principal_cents: int, annual_rate: float, term_months: int) -> int:
    """Fixed monthly payment, M = P * r(1+r)^n / ((1+r)^n - 1).

    A zero rate spreads the principal evenly over the term.
    """
    rate = Decimal(str(annual_rate)) / 12
    if rate == 0:
        return _round_cents(Decimal(principal_cents) / term_months)
    growth = (1 + rate) ** term_months
    return _round_cents(Decimal(principal_cents) * rate * growth / (growth - 1))


def calculate_mortgage(
    principal_cents: int,
    annual_rate: float,
    term_months: int,
    start_date: date,
    extra_payment_cents: int = 0,
) -> MortgageCalculation:
    """Build the amortization schedule of a fixed-rate loan.

    Args:
        principal_cents: Amount borrowed
        annual_rate: Yearly rate as a fraction (0.035 for 3.5%)
        term_months: Number of monthly payments
        start_date: Loan start; the first payment falls one month later
        extra_payment_cents: Extra principal paid every month

    Interest is rounded to whole cents each month. The last payment clears
    whatever balance rounding left, and no payment exceeds what is owed.

    Raises:
        ValidationError: If an argument is out of range
    """
    if principal_cents <= 0:
        raise ValidationError("Principal must be positive")
    if term_months <= 0:
        raise ValidationError("Term must be at least one month")
    if annual_rate < 0:
        raise ValidationError("Interest rate cannot be negative")
    if extra_payment_cents < 0:
        raise ValidationError("Extra payment cannot be negative")

    payment = monthly_payment(principal_cents, annual_rate, term_months)
    rate = Decimal(str(annual_rate)) / 12

    schedule = []
    balance = principal_cents
    total_interest = total_principal = 0
    for month in range(1, term_months + 1):
        interest = _round_cents(balance * rate)
        principal = payment - interest + extra_payment_cents
        if principal > balance or month == term_months:
            principal = balance
        balance -= principal
        total_interest += interest
        total_principal += principal
        schedule.append(
            AmortizationRow(
                month=month,
                date=start_date + relativedelta(months=month),
                payment=principal + interest,
                principal=principal,
                interest=interest,
                balance=balance,
                total_interest=total_interest,
                total_principal=total_principal,
            )
        )
        if balance == 0:
            break

    return MortgageCalculation(
        monthly_payment=payment,
        total_payment=total_principal + total_interest,
        total_interest=total_interest,
        schedule=tuple(schedule),
    )
