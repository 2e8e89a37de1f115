"""Scales, tonalities and key signatures.

A scale maps an integer *scale step* (and an octave counted from the tonic)
to a concrete MIDI pitch. Every scale variant is described by a
:class:`ScaleKind` record in ``SCALE_KINDS``:

- its semitone step pattern,
- an optional letter-number pattern (which letter each step is spelled
  with, relative to the tonic letter) - absent for the chromatic scale,
- the tonality whose key signatures it uses.

Callers that need letter spelling check ``Scale.has_letter_numbers`` rather
than relying on an exception; the chromatic scale falls back to a fixed
step-to-letter table.

Module-level helpers:
- `make_scale(kind, key)`: Build a validated :class:`Scale` by kind name.
- `major()`, `natural_minor()`, `harmonic_minor()`, `major_pentatonic()`,
  `minor_pentatonic()`, `chromatic()`: Convenience constructors.
"""

import dataclasses
import enum
import typing

import germline.errors
import germline.note_names


MAX_SHARPS_OR_FLATS = 7

# Letter used for each chromatic step; there is no tonal center to spell from.
CHROMATIC_STEP_LETTERS: typing.List[str] = ["C", "C", "D", "E", "E", "F", "F", "G", "G", "A", "B", "B"]


class Tonality (enum.Enum):

	"""
	The two tonalities a key signature can express.
	"""

	MAJOR = "major"
	MINOR = "minor"

	@property
	def midi_value (self) -> int:

		"""Return 0 for major and 1 for minor, as stored in MIDI key signature events."""

		return 0 if self is Tonality.MAJOR else 1

	@property
	def default_key (self) -> germline.note_names.NoteName:

		"""Return the key with no sharps or flats (C major, A minor)."""

		return germline.note_names.NoteName("C" if self is Tonality.MAJOR else "A")

	def sharps_or_flats (self, key_name: germline.note_names.NoteName) -> int:

		"""Return the number of sharps (positive) or flats (negative) of this key."""

		if self is Tonality.MAJOR:
			return key_name.major_key_sharps_or_flats

		return key_name.minor_key_sharps_or_flats

	def is_valid_key_name (self, key_name: germline.note_names.NoteName) -> bool:

		"""Return False for keys that would need double sharps or flats, such as A# major."""

		return abs(self.sharps_or_flats(key_name)) <= MAX_SHARPS_OR_FLATS

	def valid_key_names (self) -> typing.List[germline.note_names.NoteName]:

		"""Return all valid key names for this tonality, ordered around the circle of fifths."""

		names = [name for name in germline.note_names.all_note_names() if self.is_valid_key_name(name)]

		return sorted(names, key=self.sharps_or_flats)


@dataclasses.dataclass(frozen=True)
class KeySignature:

	"""
	A validated key signature (tonality plus tonal center).

	Raises:
		InvalidKeySignatureError: At construction, for keys with double sharps or flats.
	"""

	tonality: Tonality
	key_name: germline.note_names.NoteName

	def __post_init__ (self) -> None:

		if not self.tonality.is_valid_key_name(self.key_name):
			valid = ", ".join(str(name) for name in self.tonality.valid_key_names())

			raise germline.errors.InvalidKeySignatureError(
				f"{self.key_name} {self.tonality.value} would need double sharps or flats. Valid keys: {valid}"
			)

	@property
	def sharps_or_flats (self) -> int:
		return self.tonality.sharps_or_flats(self.key_name)

	@property
	def midi_key (self) -> str:

		"""Return the key as spelled by MIDI key signature meta messages, e.g. ``"Bb"`` or ``"G#m"``."""

		return str(self.key_name) + ("m" if self.tonality is Tonality.MINOR else "")

	def __str__ (self) -> str:
		return f"{self.key_name} {self.tonality.value}"


@dataclasses.dataclass(frozen=True)
class ScaleKind:

	"""
	The capability record shared by every scale of one variant.
	"""

	name: str
	steps: typing.Tuple[int, ...]
	tonality: Tonality
	letter_numbers: typing.Optional[typing.Tuple[int, ...]] = None


SCALE_KINDS: typing.Dict[str, ScaleKind] = {
	"major": ScaleKind("major", (0, 2, 4, 5, 7, 9, 11), Tonality.MAJOR, (0, 1, 2, 3, 4, 5, 6)),
	"natural_minor": ScaleKind("natural_minor", (0, 2, 3, 5, 7, 8, 10), Tonality.MINOR, (0, 1, 2, 3, 4, 5, 6)),
	"harmonic_minor": ScaleKind("harmonic_minor", (0, 2, 3, 5, 7, 8, 11), Tonality.MINOR, (0, 1, 2, 3, 4, 5, 6)),
	"major_pentatonic": ScaleKind("major_pentatonic", (0, 2, 4, 7, 9), Tonality.MAJOR, (0, 1, 2, 4, 5)),
	"minor_pentatonic": ScaleKind("minor_pentatonic", (0, 3, 5, 7, 10), Tonality.MINOR, (0, 2, 3, 4, 6)),
	"chromatic": ScaleKind("chromatic", tuple(range(12)), Tonality.MAJOR),
}


@dataclasses.dataclass(frozen=True)
class Scale:

	"""
	A scale kind rooted on a tonal center.

	Octaves are counted from the tonic: in G major, ``pitch_for(3, 4)`` is C5
	(72) because C5 is the fourth step above G4. Middle C is 60.
	"""

	kind: ScaleKind
	key_name: germline.note_names.NoteName = germline.note_names.NoteName("C")

	def __post_init__ (self) -> None:

		if self.kind.letter_numbers is None:
			# No tonal center: spell everything against C major.
			object.__setattr__(self, "key_name", germline.note_names.NoteName("C"))

		KeySignature(self.kind.tonality, self.key_name)

	@property
	def name (self) -> str:
		return self.kind.name

	@property
	def steps_per_octave (self) -> int:
		return len(self.kind.steps)

	@property
	def key_signature (self) -> KeySignature:
		return KeySignature(self.kind.tonality, self.key_name)

	@property
	def has_letter_numbers (self) -> bool:
		return self.kind.letter_numbers is not None

	@property
	def _tonic_offset (self) -> int:

		# Not reduced mod 12, so Cb4 sits below C4.
		return germline.note_names.LETTER_TO_PC[self.key_name.letter] + self.key_name.accidental

	def pitch_for (self, scale_step: int, octave: int, chromatic_adjustment: int = 0) -> int:

		"""
		Return the MIDI pitch of a scale step in an octave (steps outside the
		octave wrap into neighbouring octaves).
		"""

		octave_offset, step = divmod(scale_step, self.steps_per_octave)

		return 12 * (octave + octave_offset + 1) + self._tonic_offset + self.kind.steps[step] + chromatic_adjustment

	def letter_name_for_step (self, scale_step: int) -> str:

		"""Return the letter a scale step is spelled with."""

		step = scale_step % self.steps_per_octave

		if self.kind.letter_numbers is None:
			return CHROMATIC_STEP_LETTERS[step]

		letter_number = (self.key_name.letter_number + self.kind.letter_numbers[step]) % len(germline.note_names.LETTERS)

		return germline.note_names.LETTERS[letter_number]

	def crosses_letter (self, scale_step: int, chromatic_adjustment: int) -> bool:

		"""Return True when the adjustment lands the step on another letter's natural pitch.

		In C major that is E#, B#, Cb and Fb (and F## in G major). The chromatic
		scale never crosses, since it has no letter pattern to cross.
		"""

		if chromatic_adjustment == 0 or self.kind.letter_numbers is None:
			return False

		letter = self.letter_name_for_step(scale_step)
		pitch_class = (self.pitch_for(scale_step % self.steps_per_octave, 0) + chromatic_adjustment) % 12

		return any(
			pitch_class == germline.note_names.LETTER_TO_PC[other]
			for other in germline.note_names.LETTERS
			if other != letter
		)

	def locate (self, letter: str, accidental: int, octave: int) -> typing.Tuple[int, int, int]:

		"""Map a spelled pitch onto this scale.

		Parameters:
			letter: Natural letter name (``"F"``).
			accidental: +1 per sharp, -1 per flat.
			octave: Scientific octave of the spelled pitch (C4 = middle C).

		Returns:
			``(scale_step, octave, chromatic_adjustment)`` with the octave counted
			from the tonic. Letters the scale spells directly keep their letter
			(F in G major is F#, flattened); anything else snaps to the nearest
			scale step below.
		"""

		midi = 12 * (octave + 1) + germline.note_names.LETTER_TO_PC[letter] + accidental
		letter_numbers = self.kind.letter_numbers

		if letter_numbers is not None:

			letter_index = germline.note_names.LETTERS.index(letter)
			relative = (letter_index - self.key_name.letter_number) % len(germline.note_names.LETTERS)

			if relative in letter_numbers:
				step = letter_numbers.index(relative)
				tonic_octave = octave - 1 if letter_index < self.key_name.letter_number else octave
				return step, tonic_octave, midi - self.pitch_for(step, tonic_octave)

		return self.locate_pitch(midi)

	def locate_pitch (self, midi: int) -> typing.Tuple[int, int, int]:

		"""
		Map an absolute MIDI pitch onto the nearest scale step at or below it.
		"""

		octave, within = divmod(midi - 12 - self._tonic_offset, 12)
		step = max(i for i, semitones in enumerate(self.kind.steps) if semitones <= within)

		return step, octave, within - self.kind.steps[step]

	def __str__ (self) -> str:

		if self.kind.letter_numbers is None:
			return self.kind.name

		return f"{self.key_name} {self.kind.name}"


def make_scale (kind: str, key: typing.Union[str, germline.note_names.NoteName] = "C") -> Scale:

	"""Build a scale by kind name.

	Parameters:
		kind: One of ``SCALE_KINDS`` (``"major"``, ``"natural_minor"``, ...).
		key: Tonal center as a name (``"Bb"``) or :class:`NoteName`. Ignored
			for the chromatic scale.

	Raises:
		ConfigurationError: For an unknown kind.
		InvalidKeySignatureError: For a key the tonality cannot express.

	Example:
		```python
		g_major = make_scale("major", "G")
		g_major.pitch_for(0, 4)   # → 67 (G4)
		```
	"""

	if kind not in SCALE_KINDS:
		raise germline.errors.ConfigurationError(f"Unknown scale: {kind!r}. Available: {sorted(SCALE_KINDS)}")

	if isinstance(key, str):
		try:
			key = germline.note_names.parse_note_name(key)
		except ValueError as exc:
			raise germline.errors.ConfigurationError(str(exc)) from exc

	return Scale(SCALE_KINDS[kind], key)


def major (key: str = "C") -> Scale:
	return make_scale("major", key)


def natural_minor (key: str = "A") -> Scale:
	return make_scale("natural_minor", key)


def harmonic_minor (key: str = "A") -> Scale:
	return make_scale("harmonic_minor", key)


def major_pentatonic (key: str = "C") -> Scale:
	return make_scale("major_pentatonic", key)


def minor_pentatonic (key: str = "A") -> Scale:
	return make_scale("minor_pentatonic", key)


def chromatic () -> Scale:
	return make_scale("chromatic")


DEFAULT_SCALE = major("C")
