"""Spelled note names and their key-signature arithmetic.

A :class:`NoteName` is a letter plus an accidental (``"F#"``, ``"Bb"``,
``"C"``). Besides its pitch class it knows how many sharps (positive) or flats
(negative) the major and minor keys on that tonic carry, which is what decides
whether a key name is valid for a tonality.

Module-level constants:
- `LETTERS`: The seven letter names in order, C first
- `LETTER_TO_PC`: Maps natural letters to pitch classes (0-11)
- `LETTER_MAJOR_SHARPS`: Sharps (or negative flats) of the major key on each natural letter
"""

import dataclasses
import re
import typing


LETTERS: typing.List[str] = ["C", "D", "E", "F", "G", "A", "B"]

LETTER_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"D": 2,
	"E": 4,
	"F": 5,
	"G": 7,
	"A": 9,
	"B": 11,
}

LETTER_MAJOR_SHARPS: typing.Dict[str, int] = {
	"F": -1,
	"C": 0,
	"G": 1,
	"D": 2,
	"A": 3,
	"E": 4,
	"B": 5,
}

# Each sharp on the tonic adds seven sharps to the key signature.
SHARPS_PER_ACCIDENTAL = 7

# A minor key has three fewer sharps than the major key on the same tonic.
MINOR_KEY_OFFSET = -3

_NOTE_NAME_PATTERN = re.compile(r"^([A-Ga-g])(#{1,2}|b{1,2})?$")


@dataclasses.dataclass(frozen=True)
class NoteName:

	"""
	A letter name with an accidental (+1 per sharp, -1 per flat).
	"""

	letter: str
	accidental: int = 0

	def __post_init__ (self) -> None:

		if self.letter not in LETTER_TO_PC:
			raise ValueError(f"Unknown letter: {self.letter!r}. Expected one of {LETTERS}.")

	@property
	def pitch_class (self) -> int:

		"""Return the pitch class (0-11) of this note name."""

		return (LETTER_TO_PC[self.letter] + self.accidental) % 12

	@property
	def letter_number (self) -> int:

		"""Return the position of the letter in ``LETTERS`` (C=0 .. B=6)."""

		return LETTERS.index(self.letter)

	@property
	def major_key_sharps_or_flats (self) -> int:
		return LETTER_MAJOR_SHARPS[self.letter] + self.accidental * SHARPS_PER_ACCIDENTAL

	@property
	def minor_key_sharps_or_flats (self) -> int:
		return self.major_key_sharps_or_flats + MINOR_KEY_OFFSET

	def __str__ (self) -> str:

		if self.accidental >= 0:
			return self.letter + "#" * self.accidental

		return self.letter + "b" * -self.accidental


def parse_note_name (name: str) -> NoteName:

	"""Parse a note name such as ``"C"``, ``"F#"`` or ``"Bb"``.

	Parameters:
		name: Letter (either case) followed by up to two ``#`` or ``b``.

	Returns:
		The corresponding :class:`NoteName`.

	Raises:
		ValueError: If the name is not recognised.

	Example:
		```python
		parse_note_name("F#").pitch_class   # → 6
		parse_note_name("Bb").pitch_class   # → 10
		```
	"""

	match = _NOTE_NAME_PATTERN.match(name.strip()) if isinstance(name, str) else None

	if match is None:
		raise ValueError(f"Unknown note name: {name!r}. Expected e.g. 'C', 'F#', 'Bb'.")

	letter, accidentals = match.groups()

	return NoteName(letter.upper(), accidental_value(accidentals or ""))


def accidental_value (accidentals: str) -> int:

	"""Return +1 per ``#`` and -1 per ``b`` in ``accidentals``."""

	return accidentals.count("#") - accidentals.count("b")


def all_note_names () -> typing.List[NoteName]:

	"""Return every single-accidental spelling (flat, natural, sharp) of every letter."""

	return [NoteName(letter, accidental) for letter in LETTERS for accidental in (-1, 0, 1)]
