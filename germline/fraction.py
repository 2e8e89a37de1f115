"""Exact rational numbers for durations and time points.

``Fraction`` extends :class:`fractions.Fraction` so that every value stays in
lowest terms with a positive denominator, arithmetic between fractions (or a
fraction and an ``int``) keeps returning ``germline.fraction.Fraction``, and
values that no longer fit a signed 64-bit numerator or denominator raise
:class:`~germline.errors.FractionOverflowError` instead of growing silently.

Durations are measured in whole notes, so ``Fraction(1, 4)`` is a quarter note.
"""

import fractions
import math
import typing

import germline.errors


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Largest tick resolution (ticks per quarter note) a downstream MIDI file can
# declare. Compositions needing more are rescaled by a power of two.
MAX_ALLOWED_DURATION_DENOM = 32767


class Fraction (fractions.Fraction):

	"""
	An exact rational number, always normalized, bounded to 64-bit integers.

	Example:
		```python
		third = Fraction(1, 3)
		assert third * 3 == 1
		assert Fraction("2/8") == Fraction(1, 4)
		```
	"""

	__slots__ = ()

	def __new__ (cls, numerator: typing.Any = 0, denominator: typing.Any = None) -> "Fraction":

		self = super().__new__(cls, numerator, denominator)

		if not INT64_MIN <= self.numerator <= INT64_MAX or self.denominator > INT64_MAX:
			raise germline.errors.FractionOverflowError(
				f"Fraction {self.numerator}/{self.denominator} exceeds the 64-bit range"
			)

		return self

	def __add__ (self, other: typing.Any) -> typing.Any:
		return _wrap(fractions.Fraction.__add__(self, other))

	def __radd__ (self, other: typing.Any) -> typing.Any:
		return _wrap(fractions.Fraction.__radd__(self, other))

	def __sub__ (self, other: typing.Any) -> typing.Any:
		return _wrap(fractions.Fraction.__sub__(self, other))

	def __rsub__ (self, other: typing.Any) -> typing.Any:
		return _wrap(fractions.Fraction.__rsub__(self, other))

	def __mul__ (self, other: typing.Any) -> typing.Any:
		return _wrap(fractions.Fraction.__mul__(self, other))

	def __rmul__ (self, other: typing.Any) -> typing.Any:
		return _wrap(fractions.Fraction.__rmul__(self, other))

	def __truediv__ (self, other: typing.Any) -> typing.Any:
		return _wrap(fractions.Fraction.__truediv__(self, other))

	def __rtruediv__ (self, other: typing.Any) -> typing.Any:
		return _wrap(fractions.Fraction.__rtruediv__(self, other))

	def __neg__ (self) -> "Fraction":
		return Fraction(-self.numerator, self.denominator)

	def __pos__ (self) -> "Fraction":
		return self

	def __abs__ (self) -> "Fraction":
		return Fraction(abs(self.numerator), self.denominator)

	def __reduce__ (self) -> typing.Tuple[typing.Any, ...]:
		return (Fraction, (self.numerator, self.denominator))

	def __copy__ (self) -> "Fraction":
		return self

	def __deepcopy__ (self, memo: typing.Dict[int, typing.Any]) -> "Fraction":
		return self


def _wrap (result: typing.Any) -> typing.Any:

	"""Re-type a stdlib arithmetic result, leaving floats and NotImplemented alone."""

	if isinstance(result, fractions.Fraction) and not isinstance(result, Fraction):
		return Fraction(result.numerator, result.denominator)

	return result


ZERO = Fraction(0)
ONE = Fraction(1)


def to_fraction (value: typing.Union[int, str, fractions.Fraction]) -> Fraction:

	"""
	Coerce an int, a ``"n/d"`` string or any rational to a :class:`Fraction`.

	Floats are rejected because they cannot represent most durations exactly.
	"""

	if isinstance(value, Fraction):
		return value

	if isinstance(value, float):
		raise TypeError(f"Refusing to build an exact duration from float {value!r}")

	return Fraction(value)


def lcm_of_denominators (values: typing.Iterable[fractions.Fraction]) -> int:

	"""
	Return the least common multiple of the denominators of ``values`` (1 when empty).
	"""

	result = 1

	for value in values:
		result = math.lcm(result, value.denominator)

	return result
