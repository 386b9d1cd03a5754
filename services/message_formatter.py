"""
Telegram message composition.

Renders a validated Submission as a Telegram MarkdownV2 message for the shop's
order channel. Labels are in Ukrainian and amounts in hryvnia, matching the
storefront.

Security:
- Every user-supplied value is escaped independently before interpolation, so
  a customer cannot break or inject formatting (e.g. a title of "*free*").
"""

from __future__ import annotations

import math
import re
from typing import List, Union

from babel.numbers import format_decimal

from domain.submission import Order, Submission

CURRENCY_LOCALE = "uk_UA"
CURRENCY_SUFFIX = " ₴"
PLACEHOLDER = "—"

ORDER_HEADER = "*Новий заказ*"
LEAD_HEADER = "*Нова заявка*"

# MarkdownV2 reserved characters (plus the backslash escape character itself).
_MARKDOWN_RESERVED = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")


def escape_markdown(text: object) -> str:
    """
    Escape a value for Telegram MarkdownV2.

    Example:
        escape_markdown("Nova Poshta #5.")
        # Returns "Nova Poshta \\#5\\."
    """
    if text is None:
        return ""
    return _MARKDOWN_RESERVED.sub(r"\\\1", str(text))


def _round_half_up(amount: float) -> int:
    return int(math.floor(amount + 0.5))


def format_currency(amount: Union[int, float]) -> str:
    """
    Format an amount as whole hryvnia with locale grouping.

    Example:
        format_currency(1499.5)
        # Returns "1 500 ₴" (grouped with a no-break space)
    """
    return format_decimal(_round_half_up(amount), locale=CURRENCY_LOCALE) + CURRENCY_SUFFIX


def format_quantity(qty: Union[int, float]) -> str:
    if isinstance(qty, float) and qty.is_integer():
        return str(int(qty))
    return str(qty)


def compose_message(submission: Submission) -> str:
    """
    Build the MarkdownV2 text posted to Telegram for a submission.

    Layout:
    - bold header (order or lead)
    - customer name and phone
    - orders only: delivery city/branch, item list, total
    - source page, when the frontend reported one
    """

    customer = submission.customer
    is_order = isinstance(submission, Order)

    lines: List[str] = [ORDER_HEADER if is_order else LEAD_HEADER, ""]
    lines.append(f"👤 *Клієнт:* `{escape_markdown(customer.display_name)}`")
    lines.append(f"📞 *Телефон:* `{escape_markdown(customer.phone.strip())}`")

    if is_order:
        city = submission.delivery.city or PLACEHOLDER
        address = submission.delivery.address or PLACEHOLDER
        lines.append(
            f"🚚 *Місто/Відділення:* `{escape_markdown(city)} / {escape_markdown(address)}`"
        )

        if submission.items:
            lines.extend(["", "*Позиції:*"])
            for item in submission.items:
                title = item.title if not item.label else f"{item.title} — {item.label}"
                lines.append(
                    f"• {escape_markdown(title)} × {escape_markdown(format_quantity(item.qty))}"
                    f" — `{escape_markdown(format_currency(item.price))}`"
                )

        lines.extend(["", f"💰 *Разом:* `{escape_markdown(format_currency(submission.total))}`"])

    if submission.source_url:
        lines.append(f"🔗 *Джерело:* {escape_markdown(submission.source_url)}")

    return "\n".join(lines)


__all__ = [
    "compose_message",
    "escape_markdown",
    "format_currency",
    "format_quantity",
]
