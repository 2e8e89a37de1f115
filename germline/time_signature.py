import dataclasses
import re

import germline.errors
import germline.fraction


_TIME_SIGNATURE_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")


@dataclasses.dataclass(frozen=True)
class TimeSignature:

	"""
	A meter such as 3/4 or 6/8. The denominator must be a power of two.
	"""

	numerator: int = 4
	denominator: int = 4

	def __post_init__ (self) -> None:

		if self.numerator < 1:
			raise germline.errors.InvalidTimeSignatureError(f"Time signature numerator must be positive, got {self.numerator}")

		if self.denominator < 1 or self.denominator & (self.denominator - 1):
			raise germline.errors.InvalidTimeSignatureError(
				f"Time signature denominator must be a power of two, got {self.denominator}"
			)

	@classmethod
	def parse (cls, text: str) -> "TimeSignature":

		"""Parse ``"6/8"`` (spaces around the numbers are allowed)."""

		match = _TIME_SIGNATURE_PATTERN.match(text)

		if match is None:
			raise germline.errors.InvalidTimeSignatureError(f"Cannot parse time signature {text!r}")

		return cls(int(match.group(1)), int(match.group(2)))

	@property
	def measure_duration (self) -> germline.fraction.Fraction:

		"""Return the length of one measure in whole notes."""

		return germline.fraction.Fraction(self.numerator, self.denominator)

	def __str__ (self) -> str:
		return f"{self.numerator}/{self.denominator}"


DEFAULT = TimeSignature(4, 4)
