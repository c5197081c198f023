from decimal import Decimal, ROUND_HALF_UP

_UNITS = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine", "Ten",
          "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen",
          "Eighteen", "Nineteen"]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def _paise(amount) -> int:
    return int((Decimal(amount or 0) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_inr(amount, symbol: str = "Rs.") -> str:
    """Indian digit grouping: 1234567.5 -> 'Rs. 12,34,567.50'."""
    paise = _paise(amount)
    sign = "-" if paise < 0 else ""
    rupees, fraction = divmod(abs(paise), 100)
    digits = str(rupees)
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups) + "," + tail
    return f"{symbol} {sign}{digits}.{fraction:02d}"


def _words(num: int) -> str:
    if num < 20:
        return _UNITS[num]
    if num < 100:
        return _TENS[num // 10] + (" " + _UNITS[num % 10] if num % 10 else "")
    if num < 1000:
        return _UNITS[num // 100] + " Hundred" + (" " + _words(num % 100) if num % 100 else "")
    if num < 100000:
        return _words(num // 1000) + " Thousand" + (" " + _words(num % 1000) if num % 1000 else "")
    if num < 10000000:
        return _words(num // 100000) + " Lakh" + (" " + _words(num % 100000) if num % 100000 else "")
    return _words(num // 10000000) + " Crore" + (" " + _words(num % 10000000) if num % 10000000 else "")


def amount_to_words(amount) -> str:
    if amount is None:
        return ""
    paise = _paise(amount)
    if paise < 0:
        return "Minus " + amount_to_words(Decimal(-paise) / 100)
    rupees, fraction = divmod(paise, 100)
    result = "Zero" if rupees == 0 else _words(rupees)
    result += " Rupees"
    if fraction:
        result += " and " + _words(fraction) + " Paise"
    return result + " Only"
