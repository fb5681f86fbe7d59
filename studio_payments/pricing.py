"""Payment schedule and tax helpers. All amounts are integer minor units."""
from decimal import Decimal, ROUND_HALF_UP

FULL_PAYMENT_DISCOUNT = Decimal("0.05")
SPLIT_INITIAL_SHARE = Decimal("0.3")
MONTHLY_INSTALLMENTS = 3

GST_RATE = Decimal("0.05")
QST_RATE = Decimal("0.09975")


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_payment_amounts(total_amount, payment_option: str) -> dict:
    total = round_half_up(total_amount)

    if payment_option == "full":
        discount = round_half_up(total * FULL_PAYMENT_DISCOUNT)
        return {
            "initialAmount": total - discount,
            "finalAmount": 0,
            "discount": discount,
            "totalAmount": total,
        }

    if payment_option == "split":
        initial = round_half_up(total * SPLIT_INITIAL_SHARE)
        return {
            "initialAmount": initial,
            "finalAmount": total - initial,
            "discount": 0,
            "totalAmount": total,
        }

    if payment_option == "monthly":
        monthly = round_half_up(Decimal(total) / MONTHLY_INSTALLMENTS)
        return {
            "initialAmount": monthly,
            "finalAmount": total - monthly,
            "monthlyAmount": monthly,
            "discount": 0,
            "totalAmount": total,
        }

    return {
        "initialAmount": total,
        "finalAmount": 0,
        "discount": 0,
        "totalAmount": total,
    }


def total_with_tax(base_amount) -> int:
    """Base price plus GST and QST."""
    base = Decimal(str(base_amount))
    return round_half_up(base + base * GST_RATE + base * QST_RATE)
