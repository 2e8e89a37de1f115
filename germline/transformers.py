"""Note list transformers.

Every transformer is a pure function object: ``transform(notes)`` returns a
new :class:`~germline.note.NoteList` and never modifies its input, so the
same germ can be fed through many transformers. Transformers are also
callable directly::

    retrograde = Retrograde()
    backwards = retrograde(germ)

The self-similarity transformer lives in :mod:`germline.self_similarity`;
it is built from :class:`Transposition`, :class:`RhythmicDuration` and
:class:`Volume`.
"""

import dataclasses
import logging
import typing

import germline.constants.dynamics
import germline.errors
import germline.fraction
import germline.note


logger = logging.getLogger(__name__)


class Transformer:

	"""
	Abstract base class for note list transformers.
	"""

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:
		raise NotImplementedError

	def __call__ (self, notes: germline.note.NoteList) -> germline.note.NoteList:
		return self.transform(notes)


class Copy (Transformer):

	"""Return an independent copy of the input."""

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:
		return notes.clone()


class Octave (Transformer):

	"""
	Shift every audible note by a whole number of octaves.
	"""

	def __init__ (self, octaves: int) -> None:
		self.octaves = octaves

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:

		return germline.note.NoteList(
			(note if note.is_rest else dataclasses.replace(note, octave=note.octave + self.octaves) for note in notes),
			instrument = notes.instrument
		)


class RhythmicDuration (Transformer):

	"""
	Multiply every duration (rests included) by a positive factor.
	"""

	def __init__ (self, factor: typing.Any) -> None:

		"""
		Parameters:
			factor: A positive ``int`` or ``Fraction``. ``Fraction(1, 2)`` plays
				twice as fast.

		Raises:
			PreconditionError: If the factor is zero or negative.
		"""

		self.factor = germline.fraction.to_fraction(factor)

		if self.factor <= 0:
			raise germline.errors.PreconditionError(f"Rhythmic duration factor must be positive, got {self.factor}")

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:

		return germline.note.NoteList(
			(dataclasses.replace(note, duration=note.duration * self.factor) for note in notes),
			instrument = notes.instrument
		)


class Volume (Transformer):

	"""
	Scale note volumes towards the maximum or towards silence.

	An adjustment of ``0.5`` moves each volume halfway to 127; ``-0.5`` moves
	it halfway to 0. Rests stay silent.
	"""

	def __init__ (self, adjustment: float) -> None:

		if not -1 <= adjustment <= 1:
			raise germline.errors.PreconditionError(f"Volume adjustment must be between -1 and 1, got {adjustment}")

		self.adjustment = adjustment

	def _adjust (self, volume: int) -> int:

		if self.adjustment >= 0:
			adjusted = volume + (germline.constants.dynamics.MAX_VOLUME - volume) * self.adjustment
		else:
			adjusted = volume + volume * self.adjustment

		return max(germline.constants.dynamics.MIN_VOLUME, min(germline.constants.dynamics.MAX_VOLUME, round(adjusted)))

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:

		return germline.note.NoteList(
			(note if note.is_rest else dataclasses.replace(note, volume=self._adjust(note.volume)) for note in notes),
			instrument = notes.instrument
		)


class Transposition (Transformer):

	"""
	Move every audible note by a number of scale steps.

	``segment_chromatic_adjustment`` is added to each note's segment
	adjustment, which is how a germ copy anchored on F# in C major keeps its
	sharp.

	A note's own accidental does not survive a move onto a step where it
	would be spelled as the neighbouring letter: A# moved up four steps in C
	major becomes E, not E#.
	"""

	def __init__ (self, scale_steps: int, segment_chromatic_adjustment: int = 0) -> None:
		self.scale_steps = scale_steps
		self.segment_chromatic_adjustment = segment_chromatic_adjustment

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:

		notes.single_scale()
		transposed = germline.note.NoteList(instrument=notes.instrument)

		for note in notes:

			if note.is_rest:
				transposed.append(note)
				continue

			moved = note.with_absolute_scale_step(note.absolute_scale_step + self.scale_steps)
			chromatic_adjustment = moved.chromatic_adjustment

			if self.scale_steps and moved.scale.crosses_letter(moved.scale_step, chromatic_adjustment):
				chromatic_adjustment = 0

			transposed.append(dataclasses.replace(
				moved,
				chromatic_adjustment = chromatic_adjustment,
				segment_chromatic_adjustment = note.segment_chromatic_adjustment + self.segment_chromatic_adjustment
			))

		return transposed


class Retrograde (Transformer):

	"""
	Reverse the order of the notes.

	Germ copy markers are remapped so every copy still starts at a marked
	note: the first marker stays put and the rest are mirrored, which makes
	applying the transformer twice return the original list.
	"""

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:

		count = len(notes)
		flags = [note.is_first_note_of_germ_copy for note in notes]

		return germline.note.NoteList(
			(
				dataclasses.replace(note, is_first_note_of_germ_copy=flags[(count - i) % count])
				for i, note in enumerate(reversed(notes))
			),
			instrument = notes.instrument
		)


class Inversion (Transformer):

	"""
	Mirror every audible note around an origin note.

	The absolute scale step, the chromatic adjustment and the segment chromatic
	adjustment are all reflected, so inverting twice around the same origin is
	the identity. The origin defaults to the first audible note of the input.
	"""

	def __init__ (self, origin: typing.Optional[germline.note.Note] = None) -> None:
		self.origin = origin

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:

		notes.single_scale()
		origin = self.origin if self.origin is not None else notes.first_audible_note()

		if origin is None:
			return notes.clone()

		inverted = germline.note.NoteList(instrument=notes.instrument)

		for note in notes:

			if note.is_rest:
				inverted.append(note)
				continue

			mirrored = note.with_absolute_scale_step(2 * origin.absolute_scale_step - note.absolute_scale_step)
			inverted.append(dataclasses.replace(
				mirrored,
				chromatic_adjustment = 2 * origin.chromatic_adjustment - note.chromatic_adjustment,
				segment_chromatic_adjustment = 2 * origin.segment_chromatic_adjustment - note.segment_chromatic_adjustment
			))

		return inverted


class RetrogradeInversion (Transformer):

	"""
	Invert around the input's first audible note, then reverse.
	"""

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:

		origin = notes.first_audible_note()

		return Retrograde().transform(Inversion(origin).transform(notes))
