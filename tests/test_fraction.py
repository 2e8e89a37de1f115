import copy
import fractions
import pickle

import pytest

import germline.errors
import germline.fraction


Fraction = germline.fraction.Fraction


def test_stored_in_lowest_terms () -> None:

	"""Values are reduced and the denominator is always positive."""

	value = Fraction(6, -8)

	assert value.numerator == -3
	assert value.denominator == 4
	assert Fraction("2/8") == Fraction(1, 4)


@pytest.mark.parametrize("a, b", [
	(Fraction(1, 3), Fraction(1, 6)),
	(Fraction(-5, 7), Fraction(2, 9)),
	(Fraction(3), Fraction(1, 1024)),
	(Fraction(0), Fraction(-7, 5)),
])
def test_add_then_subtract_round_trips (a: Fraction, b: Fraction) -> None:

	"""(a + b) - b gives back a exactly."""

	assert (a + b) - b == a


def test_arithmetic_keeps_the_bounded_type () -> None:

	"""Results with ints and other fractions stay germline Fractions."""

	third = Fraction(1, 3)

	for result in (third + 1, 1 + third, third - third, 2 - third, third * 3, 3 * third, third / 2, 1 / third, -third, abs(-third)):
		assert isinstance(result, Fraction)

	assert third * 3 == 1


def test_float_results_are_not_wrapped () -> None:

	"""Mixing with a float falls back to float arithmetic."""

	assert Fraction(1, 4) + 0.5 == 0.75
	assert float(Fraction(1, 4)) == 0.25


def test_overflow_raises_numeric_error () -> None:

	"""Values outside the signed 64-bit range fail loudly."""

	with pytest.raises(germline.errors.FractionOverflowError):
		Fraction(2 ** 63)

	big = Fraction(germline.fraction.INT64_MAX)

	with pytest.raises(germline.errors.FractionOverflowError):
		big * 2

	with pytest.raises(germline.errors.NumericError):
		Fraction(1, 2 ** 62) * Fraction(1, 3)


def test_overflow_is_distinct_from_precondition_errors () -> None:

	"""Numeric failures are not structural ones."""

	assert issubclass(germline.errors.FractionOverflowError, ArithmeticError)
	assert not issubclass(germline.errors.FractionOverflowError, germline.errors.PreconditionError)


def test_zero_denominator () -> None:

	"""Division by zero surfaces as ZeroDivisionError."""

	with pytest.raises(ZeroDivisionError):
		Fraction(1, 0)

	with pytest.raises(ZeroDivisionError):
		Fraction(1, 4) / 0


def test_equality_and_hashing_by_value () -> None:

	"""Equal values hash alike regardless of how they were written."""

	assert Fraction(2, 4) == fractions.Fraction(1, 2)
	assert hash(Fraction(2, 4)) == hash(fractions.Fraction(1, 2))
	assert hash(Fraction(4, 2)) == hash(2)
	assert len({Fraction(1, 2), Fraction(2, 4), Fraction(3, 6)}) == 1


def test_ordering () -> None:

	assert Fraction(1, 3) < Fraction(1, 2) <= Fraction(2, 4) < 1
	assert max(Fraction(1, 8), Fraction(3, 16)) == Fraction(3, 16)


def test_to_fraction () -> None:

	"""Ints, strings and rationals convert; floats are refused."""

	assert germline.fraction.to_fraction(3) == Fraction(3)
	assert germline.fraction.to_fraction("3/8") == Fraction(3, 8)
	assert isinstance(germline.fraction.to_fraction(fractions.Fraction(1, 5)), Fraction)

	with pytest.raises(TypeError):
		germline.fraction.to_fraction(0.5)


def test_lcm_of_denominators () -> None:

	assert germline.fraction.lcm_of_denominators([Fraction(1, 4), Fraction(5, 6), Fraction(2)]) == 12
	assert germline.fraction.lcm_of_denominators([]) == 1


def test_copy_and_pickle_preserve_type () -> None:

	value = Fraction(7, 12)

	assert copy.deepcopy(value) is value
	assert isinstance(pickle.loads(pickle.dumps(value)), Fraction)
	assert pickle.loads(pickle.dumps(value)) == value
