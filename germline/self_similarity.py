"""The recursive self-similarity expansion.

Each iteration replaces every note of the germ with a transformed copy of
the whole germ, anchored on that note:

- with pitch applied, the copy is transposed so its first audible note lands
  on the anchoring note (accidentals included);
- with rhythm applied, the copy is compressed to the anchoring note's
  duration, so the total length never changes;
- with volume applied, the copy gets louder or softer according to where the
  anchoring note sits in the germ's volume range.

Rests are not expanded: each yields one rest occupying the same share of the
iteration. The output of one iteration is the germ of the next.
"""

import dataclasses
import logging

import germline.errors
import germline.fraction
import germline.note
import germline.transformers


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class SelfSimilaritySettings:

	"""
	Which note properties the expansion follows, and how many times it runs.

	Raises:
		PreconditionError: If ``iterations`` is below one.
	"""

	apply_to_pitch: bool = True
	apply_to_rhythm: bool = True
	apply_to_volume: bool = True
	iterations: int = 1

	def __post_init__ (self) -> None:

		if self.iterations < 1:
			raise germline.errors.PreconditionError(f"Self-similarity needs at least one iteration, got {self.iterations}")

	@property
	def is_active (self) -> bool:

		"""False when no property is followed, in which case sections play the germ unchanged."""

		return self.apply_to_pitch or self.apply_to_rhythm or self.apply_to_volume


class SelfSimilarityTransformer (germline.transformers.Transformer):

	"""
	Expand a germ into nested copies of itself.

	Example:
		```python
		settings = SelfSimilaritySettings(iterations=2)
		expanded = SelfSimilarityTransformer(settings)(germ)
		assert expanded.duration == germ.duration
		```
	"""

	def __init__ (self, settings: SelfSimilaritySettings) -> None:
		self.settings = settings

	def transform (self, notes: germline.note.NoteList) -> germline.note.NoteList:

		"""Run every iteration; each builds a fresh list from the previous one.

		Raises:
			GermIsEmptyError: If the germ has no notes.
			PreconditionError: If an iteration's germ has no positive total duration.
			InconsistentScaleError: If pitch is applied to notes on different scales.
		"""

		if not notes:
			raise germline.errors.GermIsEmptyError("Cannot apply self-similarity to an empty germ")

		current = notes

		for iteration in range(1, self.settings.iterations + 1):
			current = self._expand(current, iteration)
			logger.debug(f"Self-similarity iteration {iteration}: {len(current)} notes, duration {current.duration}")

		return current

	def _expand (self, germ: germline.note.NoteList, iteration: int) -> germline.note.NoteList:

		total = germ.duration

		if total <= 0:
			raise germline.errors.PreconditionError(
				f"Self-similarity iteration {iteration}: germ total duration must be positive, got {total}"
			)

		if self.settings.apply_to_pitch:
			germ.single_scale()

		first = germ.first_audible_note()
		reference_volume = self._reference_volume(germ)
		expanded = germline.note.NoteList(instrument=germ.instrument)

		for anchor in germ:

			scale = anchor.duration / total if self.settings.apply_to_rhythm else germline.fraction.ONE

			if anchor.is_rest:
				segment = germline.note.NoteList([germline.note.Note.rest(total * scale, anchor.source_voice_section)])
			else:
				segment = self._segment(germ, first, anchor, scale, reference_volume)

			expanded.extend(segment.with_first_notes_of_germ_copy(0))

		return expanded

	def _segment (
		self,
		germ: germline.note.NoteList,
		first: germline.note.Note,
		anchor: germline.note.Note,
		scale: germline.fraction.Fraction,
		reference_volume: int
	) -> germline.note.NoteList:

		segment = germ

		if self.settings.apply_to_pitch:
			segment = germline.transformers.Transposition(
				anchor.absolute_scale_step - first.absolute_scale_step,
				(anchor.chromatic_adjustment + anchor.segment_chromatic_adjustment)
				- (first.chromatic_adjustment + first.segment_chromatic_adjustment)
			)(segment)

		if self.settings.apply_to_rhythm:
			segment = germline.transformers.RhythmicDuration(scale)(segment)

		if self.settings.apply_to_volume and reference_volume > 0:
			adjustment = (anchor.volume - reference_volume) / reference_volume
			segment = germline.transformers.Volume(max(-1.0, min(1.0, adjustment)))(segment)

		return segment.clone() if segment is germ else segment

	@staticmethod
	def _reference_volume (germ: germline.note.NoteList) -> int:

		# Midpoint of the audible volume range.
		volumes = [note.volume for note in germ if not note.is_rest]

		if not volumes:
			return 0

		return (min(volumes) + max(volumes)) // 2
