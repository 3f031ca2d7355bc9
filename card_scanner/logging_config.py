"""Console logging with card numbers masked."""
import logging
import re
import sys

# 12-19 digits, optionally grouped with spaces or dashes
CARD_NUMBER_PATTERN = re.compile(r'(?<!\d)(?:\d[ -]?){11,18}\d(?!\d)')

LOG_FORMAT = '[%(levelname)s] %(name)s: %(message)s'


def mask_card_numbers(text):
    def _mask(match):
        digits = re.sub(r'\D', '', match.group(0))
        return '*' * (len(digits) - 4) + digits[-4:]
    return CARD_NUMBER_PATTERN.sub(_mask, text)


class CardNumberRedactingFormatter(logging.Formatter):
    """Formatter that never lets a full card number through."""

    def format(self, record):
        return mask_card_numbers(super().format(record))


def setup_logging(level='INFO', stream=None):
    """Install a single redacting console handler on the ``card_scanner`` logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(CardNumberRedactingFormatter(LOG_FORMAT))

    logger = logging.getLogger('card_scanner')
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
