"""Mod-10 check digit validation for 16-digit card numbers."""

CARD_NUMBER_LENGTH = 16

DIGITS = frozenset('0123456789')


def is_valid(digits):
    """Return True if ``digits`` is 16 ASCII digits whose last one is the mod-10 check digit."""
    if not isinstance(digits, str) or len(digits) != CARD_NUMBER_LENGTH:
        return False
    if not DIGITS.issuperset(digits):
        return False

    total = 0
    # payload read right to left, doubling every even position
    for i, ch in enumerate(reversed(digits[:-1])):
        value = int(ch)
        if i % 2 == 0:
            value *= 2
            if value > 9:
                value -= 9
        total += value

    return (total * 9) % 10 == int(digits[-1])
