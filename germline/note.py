"""Notes, note lists and the germ string parser.

A :class:`Note` is an immutable value: either a pitched sound located on a
:class:`~germline.scales.Scale` (scale step, octave, chromatic adjustment)
or a rest. Transformers never modify notes; they build new ones with
:func:`dataclasses.replace`, so a note can safely appear in several lists.

Two pieces of structural metadata ride along with every note:

- ``is_first_note_of_germ_copy`` marks where each self-similar copy of the
  germ begins. Copies are reordered and nested by later transformations, so
  this cannot be recovered from positions afterwards.
- ``source_voice_section`` identifies the voice section that generated the
  note. Adjacent rests are merged only when they share it.

Germ strings are whitespace separated notes of the form
``LETTER[#|b]OCTAVE[,DURATION[,VOLUME]]`` or ``R[,DURATION]`` for a rest::

    G4,1/4,MF A4,1/8 B4 R,1/8 F#4,1/4,96

Duration and volume default to the previous note's values.
"""

import dataclasses
import logging
import re
import typing

import germline.constants.durations
import germline.constants.dynamics
import germline.errors
import germline.fraction
import germline.note_names
import germline.scales


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Note:

	"""
	A single pitched note or rest.

	Attributes:
		scale_step: Index into the scale's step pattern (0-based, normalized
			into one octave).
		octave: Octave counted from the tonic (G4 in G major is step 0, octave 4).
		chromatic_adjustment: Semitones added on top of the scale pitch
			(+1 for a sharp the scale does not contain).
		duration: Length in whole notes.
		volume: MIDI volume (0-127); always 0 for rests.
		scale: The scale the step refers to (``None`` for rests).
		is_rest: True for silences.
		segment_chromatic_adjustment: Accidental inherited from the germ note
			a self-similar copy was anchored on.
		is_first_note_of_germ_copy: True for the first note of each germ copy.
			Set by the parser and the self-similarity expansion, kept on copy
			starts by :class:`~germline.transformers.Retrograde`; otherwise it is
			metadata for consumers that need the copy boundaries.
		source_voice_section: The voice section that produced the note.
	"""

	scale_step: int = 0
	octave: int = 4
	chromatic_adjustment: int = 0
	duration: germline.fraction.Fraction = germline.constants.durations.DEFAULT_DURATION
	volume: int = germline.constants.dynamics.DEFAULT_VOLUME
	scale: typing.Optional[germline.scales.Scale] = germline.scales.DEFAULT_SCALE
	is_rest: bool = False
	segment_chromatic_adjustment: int = 0
	is_first_note_of_germ_copy: bool = False
	source_voice_section: typing.Any = dataclasses.field(default=None, compare=False, repr=False)

	def __post_init__ (self) -> None:

		object.__setattr__(self, "duration", germline.fraction.to_fraction(self.duration))

		if self.duration < 0:
			raise germline.errors.InvalidNoteError(f"Note duration cannot be negative: {self.duration}")

		if not germline.constants.dynamics.MIN_VOLUME <= self.volume <= germline.constants.dynamics.MAX_VOLUME:
			raise germline.errors.InvalidNoteError(f"Note volume must be between 0 and 127, got {self.volume}")

		if self.is_rest:
			return

		if self.scale is None:
			raise germline.errors.InvalidNoteError("A pitched note needs a scale")

		octave_offset, step = divmod(self.scale_step, self.scale.steps_per_octave)

		if octave_offset:
			object.__setattr__(self, "scale_step", step)
			object.__setattr__(self, "octave", self.octave + octave_offset)

	@classmethod
	def rest (cls, duration: typing.Any, source_voice_section: typing.Any = None) -> "Note":

		"""Create a rest of the given duration."""

		return cls(
			scale_step = 0,
			octave = 0,
			duration = duration,
			volume = 0,
			scale = None,
			is_rest = True,
			source_voice_section = source_voice_section
		)

	@property
	def midi_pitch (self) -> typing.Optional[int]:

		"""Return the MIDI pitch, or ``None`` for a rest."""

		if self.is_rest or self.scale is None:
			return None

		return self.scale.pitch_for(
			self.scale_step,
			self.octave,
			self.chromatic_adjustment + self.segment_chromatic_adjustment
		)

	@property
	def absolute_scale_step (self) -> int:

		"""Return the scale step counted from the tonic of octave 0."""

		if self.is_rest or self.scale is None:
			return 0

		return self.octave * self.scale.steps_per_octave + self.scale_step

	def with_absolute_scale_step (self, absolute_scale_step: int) -> "Note":

		"""Return a copy moved to another absolute scale step (rests are returned unchanged)."""

		if self.is_rest or self.scale is None:
			return self

		octave, step = divmod(absolute_scale_step, self.scale.steps_per_octave)

		return dataclasses.replace(self, scale_step=step, octave=octave)

	def copy (self) -> "Note":
		return dataclasses.replace(self)


class NoteList (list):

	"""
	An ordered sequence of notes, owning the name of the instrument that plays it.
	"""

	def __init__ (self, notes: typing.Iterable[Note] = (), instrument: typing.Optional[str] = None) -> None:

		super().__init__(notes)
		self.instrument = instrument

	@property
	def duration (self) -> germline.fraction.Fraction:

		"""Return the sum of all note durations."""

		return sum((note.duration for note in self), germline.fraction.ZERO)

	def first_audible_note (self) -> typing.Optional[Note]:

		"""Return the first note that is not a rest, or ``None``."""

		for note in self:
			if not note.is_rest:
				return note

		return None

	def clone (self) -> "NoteList":

		"""Return a new list holding copies of every note."""

		return NoteList((note.copy() for note in self), instrument=self.instrument)

	def scales (self) -> typing.List[germline.scales.Scale]:

		"""Return the distinct scales of the audible notes, in order of appearance."""

		found: typing.List[germline.scales.Scale] = []

		for note in self:
			if not note.is_rest and note.scale not in found:
				found.append(note.scale)

		return found

	def single_scale (self) -> typing.Optional[germline.scales.Scale]:

		"""Return the one scale shared by all audible notes.

		Raises:
			InconsistentScaleError: If the audible notes reference different scales.
		"""

		found = self.scales()

		if len(found) > 1:
			raise germline.errors.InconsistentScaleError(
				f"Expected one scale, found {len(found)}: {', '.join(str(scale) for scale in found)}"
			)

		return found[0] if found else None

	def with_scale (self, scale: germline.scales.Scale) -> "NoteList":

		"""Return a copy with every audible note moved onto ``scale``, keeping steps and octaves."""

		self.single_scale()

		return NoteList(
			(note if note.is_rest else dataclasses.replace(note, scale=scale) for note in self),
			instrument = self.instrument
		)

	def with_source_voice_section (self, source: typing.Any) -> "NoteList":

		"""Return a copy with every note tagged as produced by ``source``."""

		return NoteList(
			(dataclasses.replace(note, source_voice_section=source) for note in self),
			instrument = self.instrument
		)

	def with_first_notes_of_germ_copy (self, *indices: int) -> "NoteList":

		"""
		Return a copy where exactly the notes at ``indices`` start a germ copy.
		"""

		wanted = set(indices)

		return NoteList(
			(dataclasses.replace(note, is_first_note_of_germ_copy=(i in wanted)) for i, note in enumerate(self)),
			instrument = self.instrument
		)

	def normalized_rests (self) -> "NoteList":

		"""Return a copy where adjacent rests are combined into one longer rest.

		Rests from different source voice sections stay separate, so structural
		boundaries between sections survive.
		"""

		normalized = NoteList(instrument=self.instrument)

		for note in self:

			previous = normalized[-1] if normalized else None

			if (
				note.is_rest
				and previous is not None
				and previous.is_rest
				and previous.source_voice_section is note.source_voice_section
			):
				normalized[-1] = dataclasses.replace(previous, duration=previous.duration + note.duration)

			else:
				normalized.append(note)

		return normalized

	def number_of_accidentals (self) -> int:

		"""Return how many notes carry a chromatic or segment chromatic adjustment."""

		return sum(
			1 for note in self
			if note.chromatic_adjustment != 0 or note.segment_chromatic_adjustment != 0
		)


_NOTE_PATTERN = re.compile(
	r"^(?:(?P<rest>[Rr])|(?P<letter>[A-Ga-g])(?P<accidentals>#{1,2}|b{1,2})?(?P<octave>-?\d+))"
	r"(?:,(?P<duration>[^,]*))?"
	r"(?:,(?P<volume>[^,]*))?$"
)


def parse_note (
	text: str,
	scale: germline.scales.Scale,
	default_duration: typing.Optional[germline.fraction.Fraction] = None,
	default_volume: typing.Optional[int] = None
) -> Note:

	"""Parse a single note such as ``"F#4,1/8,MF"`` or ``"R,1/4"``.

	Parameters:
		text: The note string.
		scale: Scale used to locate the pitch.
		default_duration: Used when the note gives no duration (quarter note if ``None``).
		default_volume: Used when the note gives no volume (MF if ``None``).

	Returns:
		The parsed :class:`Note`.

	Raises:
		NoteStringParseError: If the text is not a note string.
		InvalidNoteError: If it parses but the duration or volume is invalid.
	"""

	match = _NOTE_PATTERN.match(text.strip())

	if match is None:
		raise germline.errors.NoteStringParseError(f"Cannot parse note string {text!r}")

	duration = _parse_duration(text, match.group("duration"), default_duration)

	if match.group("rest"):
		return Note.rest(duration)

	volume = _parse_volume(text, match.group("volume"), default_volume)
	letter = match.group("letter").upper()
	accidental = germline.note_names.accidental_value(match.group("accidentals") or "")
	step, octave, chromatic_adjustment = scale.locate(letter, accidental, int(match.group("octave")))

	return Note(
		scale_step = step,
		octave = octave,
		chromatic_adjustment = chromatic_adjustment,
		duration = duration,
		volume = volume,
		scale = scale
	)


def _parse_duration (text: str, field: typing.Optional[str], default: typing.Optional[germline.fraction.Fraction]) -> germline.fraction.Fraction:

	if field is None or not field.strip():
		return default if default is not None else germline.constants.durations.DEFAULT_DURATION

	try:
		duration = germline.fraction.Fraction(field.strip())
	except ValueError as exc:
		raise germline.errors.NoteStringParseError(f"Invalid duration {field!r} in {text!r}") from exc
	except ZeroDivisionError as exc:
		raise germline.errors.InvalidNoteError(f"Duration {field!r} in {text!r} has a zero denominator") from exc

	if duration <= 0:
		raise germline.errors.InvalidNoteError(f"Duration must be positive in {text!r}")

	return duration


def _parse_volume (text: str, field: typing.Optional[str], default: typing.Optional[int]) -> int:

	if field is None or not field.strip():
		return default if default is not None else germline.constants.dynamics.DEFAULT_VOLUME

	field = field.strip()

	if field.isdigit():
		volume = int(field)

		if volume > germline.constants.dynamics.MAX_VOLUME:
			raise germline.errors.InvalidNoteError(f"Volume {volume} out of range in {text!r}")

		return volume

	try:
		return germline.constants.dynamics.volume_for_dynamic(field)
	except ValueError as exc:
		raise germline.errors.NoteStringParseError(f"Unknown dynamic {field!r} in {text!r}") from exc


def parse_note_list (text: str, scale: germline.scales.Scale) -> NoteList:

	"""Parse a whitespace separated germ string into a :class:`NoteList`.

	Each note inherits the duration of the note before it and the volume of the
	last audible note when it does not give its own. The first note is marked as
	the start of a germ copy.

	Example:
		```python
		germ = parse_note_list("G4,1/4 A4,1/8 B4 G4,1/4", germline.scales.major("G"))
		germ.duration   # → Fraction(3, 4)
		```
	"""

	notes = NoteList()
	default_duration: typing.Optional[germline.fraction.Fraction] = None
	default_volume: typing.Optional[int] = None

	for token in text.split():

		note = parse_note(token, scale, default_duration, default_volume)
		default_duration = note.duration

		if not note.is_rest:
			default_volume = note.volume

		notes.append(note)

	if notes:
		notes[0] = dataclasses.replace(notes[0], is_first_note_of_germ_copy=True)

	logger.debug(f"Parsed germ of {len(notes)} notes in {scale}")

	return notes
