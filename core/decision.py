"""
Threshold decision for the binary classifier.

The model's single output is the probability of the positive class ("Dog").
The confidence shown to the user is that raw score for both labels, so a
"Cat" result reads as a low percentage.
"""
from decimal import Decimal, ROUND_HALF_UP

import config


def decide(score, threshold=config.DECISION_THRESHOLD):
    """Map a score to a label; a score equal to the threshold is negative."""
    return config.POSITIVE_LABEL if score > threshold else config.NEGATIVE_LABEL


def format_confidence(score):
    """Percentage string of the raw score, one decimal place, ties rounded up."""
    percent = Decimal(score * 100).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
    return f"{percent}%"
