"""Exact note values as whole-note ``Fraction`` durations.

A quarter note is ``Fraction(1, 4)``. Multiply by a count for multi-note
durations::

    import germline.constants.durations as dur

    # "three eighth notes"
    length = 3 * dur.EIGHTH     # Fraction(3, 8)

Triplet values are exact, so three triplet eighths add up to one quarter note
with no rounding.
"""

import germline.fraction


WHOLE = germline.fraction.Fraction(1, 1)
HALF = germline.fraction.Fraction(1, 2)
DOTTED_QUARTER = germline.fraction.Fraction(3, 8)
QUARTER = germline.fraction.Fraction(1, 4)
TRIPLET_QUARTER = germline.fraction.Fraction(1, 6)
DOTTED_EIGHTH = germline.fraction.Fraction(3, 16)
EIGHTH = germline.fraction.Fraction(1, 8)
TRIPLET_EIGHTH = germline.fraction.Fraction(1, 12)
SIXTEENTH = germline.fraction.Fraction(1, 16)
THIRTYSECOND = germline.fraction.Fraction(1, 32)

DEFAULT_DURATION = QUARTER

# Whole notes per quarter note, for converting durations to beats.
QUARTERS_PER_WHOLE = 4
