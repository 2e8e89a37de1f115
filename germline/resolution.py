"""Resolve assembled voices to integer MIDI ticks.

Every start time and duration in the piece is an exact fraction of a whole
note. The tick resolution is the least common multiple of all their
denominators once expressed in quarter notes, so every event lands on a whole
tick. When that resolution exceeds what a MIDI file can declare, the whole
piece is slowed down by a power of two (and the tempo raised to match) until
it fits; this never rounds a single event.
"""

import dataclasses
import itertools
import logging
import typing

import germline.constants.durations
import germline.errors
import germline.fraction
import germline.note
import germline.scales
import germline.time_signature


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class TimedNote:

	"""A sounding note placed on the tick grid."""

	start_tick: int
	duration_ticks: int
	pitch: int
	volume: int
	channel: int


@dataclasses.dataclass(frozen=True)
class VoiceTimeline:

	"""Every sounding note of one voice, in start order. Rests are the gaps between them."""

	channel: int
	instrument_name: typing.Optional[str]
	notes: typing.Tuple[TimedNote, ...]
	end_tick: int


@dataclasses.dataclass(frozen=True)
class KeySignatureChange:

	tick: int
	key_signature: germline.scales.KeySignature


@dataclasses.dataclass(frozen=True)
class PieceResult:

	"""
	The tick-resolved piece, ready for a renderer.

	Attributes:
		ticks_per_quarter: Tick resolution.
		time_scale: Power of two the piece was stretched by to fit the resolution
			bound; renderers multiply the tempo by it.
		tempo: Tempo in quarter notes per minute before stretching.
		time_signature: The piece's meter.
		voices: One timeline per voice, in channel order.
		key_signature_changes: Key signature at each section start where it changes.
	"""

	ticks_per_quarter: int
	time_scale: int
	tempo: int
	time_signature: germline.time_signature.TimeSignature
	voices: typing.Tuple[VoiceTimeline, ...]
	key_signature_changes: typing.Tuple[KeySignatureChange, ...]

	@property
	def effective_tempo (self) -> int:
		return self.tempo * self.time_scale

	@property
	def end_tick (self) -> int:
		return max((voice.end_tick for voice in self.voices), default=0)

	@property
	def measures (self) -> germline.fraction.Fraction:

		"""Return the length of the piece in measures of its time signature."""

		measure_ticks = _quarters(self.time_signature.measure_duration) * self.ticks_per_quarter * self.time_scale

		return germline.fraction.Fraction(self.end_tick) / measure_ticks


def _quarters (value: germline.fraction.Fraction) -> germline.fraction.Fraction:
	return value * germline.constants.durations.QUARTERS_PER_WHOLE


def time_points (notes: germline.note.NoteList) -> typing.Iterator[germline.fraction.Fraction]:

	"""Yield the start time and duration of every note, in whole notes."""

	elapsed = germline.fraction.ZERO

	for note in notes:
		yield elapsed
		yield note.duration
		elapsed += note.duration


def compute_resolution (
	note_lists: typing.Iterable[germline.note.NoteList],
	max_resolution: int = germline.fraction.MAX_ALLOWED_DURATION_DENOM,
	extra_time_points: typing.Iterable[germline.fraction.Fraction] = ()
) -> typing.Tuple[int, int]:

	"""Find the smallest exact tick resolution.

	Parameters:
		note_lists: The voices, each starting at time zero.
		max_resolution: Largest ticks-per-quarter value allowed.
		extra_time_points: Other times (in whole notes) that must land on a tick,
			such as section starts.

	Returns:
		``(ticks_per_quarter, time_scale)``. Multiplying a time in quarter notes
		by ``ticks_per_quarter * time_scale`` gives an exact tick.

	Raises:
		ResolutionError: If halving by powers of two cannot bring the resolution
			within ``max_resolution``.

	Example:
		```python
		compute_resolution([parse_note_list("C4,1/12 D4,1/24", scale)])   # → (6, 1)
		```
	"""

	values = itertools.chain(itertools.chain.from_iterable(time_points(notes) for notes in note_lists), extra_time_points)
	resolution = germline.fraction.lcm_of_denominators(_quarters(value) for value in values)

	time_scale = 1

	while resolution > max_resolution and resolution % 2 == 0:
		resolution //= 2
		time_scale *= 2

	if resolution > max_resolution:
		raise germline.errors.ResolutionError(
			f"Tick resolution {resolution * time_scale} cannot be brought within {max_resolution} by a power-of-two rescale"
		)

	if time_scale > 1:
		logger.info(f"Piece stretched by {time_scale} to fit {resolution} ticks per quarter")

	return resolution, time_scale


def to_ticks (value: germline.fraction.Fraction, ticks_per_quarter: int, time_scale: int) -> int:

	"""Convert a time in whole notes to ticks, failing loudly if it is not exact."""

	ticks = _quarters(value) * ticks_per_quarter * time_scale

	if ticks.denominator != 1:
		raise germline.errors.ResolutionError(f"{value} does not fall on a tick at {ticks_per_quarter} ticks per quarter")

	return ticks.numerator


def build_timeline (
	channel: int,
	instrument_name: typing.Optional[str],
	notes: germline.note.NoteList,
	ticks_per_quarter: int,
	time_scale: int
) -> VoiceTimeline:

	timed: typing.List[TimedNote] = []
	elapsed = germline.fraction.ZERO

	for note in notes:

		if not note.is_rest and note.duration > 0:
			timed.append(TimedNote(
				start_tick = to_ticks(elapsed, ticks_per_quarter, time_scale),
				duration_ticks = to_ticks(note.duration, ticks_per_quarter, time_scale),
				pitch = note.midi_pitch,
				volume = note.volume,
				channel = channel
			))

		elapsed += note.duration

	return VoiceTimeline(channel, instrument_name, tuple(timed), to_ticks(elapsed, ticks_per_quarter, time_scale))


def build_result (
	voices: typing.Sequence[typing.Tuple[int, typing.Optional[str], germline.note.NoteList]],
	tempo: int,
	time_signature: germline.time_signature.TimeSignature,
	section_scales: typing.Sequence[typing.Tuple[germline.fraction.Fraction, germline.scales.Scale]] = (),
	max_resolution: int = germline.fraction.MAX_ALLOWED_DURATION_DENOM
) -> PieceResult:

	"""Resolve every voice to ticks and collect the key signature changes.

	Parameters:
		voices: ``(channel, instrument name, notes)`` for each voice.
		tempo: Quarter notes per minute.
		time_signature: The piece's meter.
		section_scales: ``(start time, scale)`` for each section in time order.
		max_resolution: Largest ticks-per-quarter value allowed.
	"""

	ticks_per_quarter, time_scale = compute_resolution(
		(notes for _, _, notes in voices),
		max_resolution,
		(start for start, _ in section_scales)
	)

	timelines = tuple(
		build_timeline(channel, instrument_name, notes, ticks_per_quarter, time_scale)
		for channel, instrument_name, notes in voices
	)

	changes: typing.List[KeySignatureChange] = []

	for start, scale in section_scales:

		key_signature = scale.key_signature

		if not changes or changes[-1].key_signature != key_signature:
			changes.append(KeySignatureChange(to_ticks(start, ticks_per_quarter, time_scale), key_signature))

	return PieceResult(
		ticks_per_quarter = ticks_per_quarter,
		time_scale = time_scale,
		tempo = tempo,
		time_signature = time_signature,
		voices = timelines,
		key_signature_changes = tuple(changes)
	)
