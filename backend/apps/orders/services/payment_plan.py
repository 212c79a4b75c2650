"""
Payment plan calculator.
Derives the deposit due now and the remaining balance from the plan inputs.
Pure functions, no database access.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal('0.01')


def to_money(value: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(value: Optional[Decimal]) -> str:
    """
    Render a decimal for display, e.g. Decimal('1234.5') -> '$1,234.50'.
    None renders as '$0.00'.
    """
    amount = to_money(value if value is not None else Decimal('0'))
    sign = '-' if amount < 0 else ''
    return f"{sign}${abs(amount):,.2f}"


def format_percent(value: Decimal) -> str:
    """Decimal('20.00') -> '20%', Decimal('12.50') -> '12.5%'."""
    text = format(Decimal(value).normalize(), 'f')
    return f"{text}%"


@dataclass(frozen=True)
class PaymentPlan:
    """Figures derived from a submission's plan inputs."""
    summary: str
    calculated_deposit: Optional[Decimal]
    balance_due: Optional[Decimal]


class PaymentPlanCalculator:
    """
    Computes deposit and balance for an order.

    Amount-type deposits are clamped to [0, total] when the total is known,
    so a deposit can never exceed the price.
    """

    SELLER_SUMMARY = "Seller submission: payment terms are set by the buyer."
    FULL_SUMMARY = "Full payment selected."

    @classmethod
    def calculate(
        cls,
        role: str,
        payment_plan: str = 'full',
        deposit_type: str = 'percent',
        deposit_value: Optional[Decimal] = None,
        total_price: Optional[Decimal] = None
    ) -> PaymentPlan:
        """
        Derive the plan summary, deposit and balance.

        Args:
            role: 'buyer' or 'seller'
            payment_plan: 'full' or 'down'
            deposit_type: 'percent' or 'amount'
            deposit_value: Percentage (0-100) or fixed amount, may be None
            total_price: Deal total, may be None when unknown

        Returns:
            PaymentPlan with a nullable calculated_deposit
        """
        total = to_money(total_price) if total_price is not None else None

        if role != 'buyer':
            return PaymentPlan(cls.SELLER_SUMMARY, None, total)

        if payment_plan != 'down':
            return PaymentPlan(cls.FULL_SUMMARY, None, total)

        if deposit_value is None:
            return PaymentPlan(
                "Down payment selected, but no deposit value was provided.",
                None,
                total
            )

        if deposit_type == 'amount':
            return cls._amount_deposit(Decimal(deposit_value), total)
        return cls._percent_deposit(Decimal(deposit_value), total)

    @classmethod
    def _percent_deposit(cls, percent: Decimal, total: Optional[Decimal]) -> PaymentPlan:
        label = format_percent(percent)
        if not total:
            return PaymentPlan(
                f"Down payment of {label} selected; the total price is needed to compute the amount.",
                None,
                total
            )

        deposit = to_money(total * percent / Decimal('100'))
        balance = cls._balance(total, deposit)
        return PaymentPlan(
            f"Down payment of {label} ({format_currency(deposit)}) due now, "
            f"balance {format_currency(balance)}.",
            deposit,
            balance
        )

    @classmethod
    def _amount_deposit(cls, amount: Decimal, total: Optional[Decimal]) -> PaymentPlan:
        deposit = to_money(max(amount, Decimal('0')))
        if total is None:
            return PaymentPlan(
                f"Down payment of {format_currency(deposit)} due now.",
                deposit,
                None
            )

        deposit = min(deposit, total)
        balance = cls._balance(total, deposit)
        return PaymentPlan(
            f"Down payment of {format_currency(deposit)} due now, "
            f"balance {format_currency(balance)}.",
            deposit,
            balance
        )

    @staticmethod
    def _balance(total: Decimal, deposit: Decimal) -> Decimal:
        return max(Decimal('0.00'), total - deposit)
