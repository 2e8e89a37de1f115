"""Voices, sections and the assembly of a complete fractal piece.

A :class:`FractalPiece` owns a germ, a list of :class:`Voice` objects and a
list of :class:`Section` objects. Every (voice, section) pair has a
:class:`VoiceSection` whose result is the voice's modified germ run through
the section's transformations::

    piece = FractalPiece("G4,1/4 A4,1/8 B4,1/8 G4,1/4", germline.scales.major("G"))
    piece.create_default_settings()
    result = piece.generate()

Results are cached. Every setting is an observed attribute: assigning it
emits ``"changed"`` on the owner's :class:`~germline.event_emitter.EventEmitter`
and the piece immediately drops every cached result derived from it.

Both are on by default: with ``generate_layered_intro`` the piece opens
with one short section per voice in which the voices enter one at a time,
starting with the last (slowest) voice; ``generate_layered_outro`` mirrors it
at the end. Each voice plays its plain modified germ there.
"""

import dataclasses
import logging
import typing

import germline.constants.midi
import germline.errors
import germline.event_emitter
import germline.fraction
import germline.note
import germline.resolution
import germline.scales
import germline.self_similarity
import germline.time_signature
import germline.transformers


logger = logging.getLogger(__name__)

DEFAULT_INSTRUMENT = "Piano"


def _observed (name: str, coerce: typing.Optional[typing.Callable[[typing.Any], typing.Any]] = None) -> property:

	"""Build a property that stores ``_name`` and emits ``"changed"`` after every assignment."""

	private = "_" + name

	def getter (self: typing.Any) -> typing.Any:
		return getattr(self, private)

	def setter (self: typing.Any, value: typing.Any) -> None:
		setattr(self, private, coerce(value) if coerce is not None else value)
		self.events.emit("changed", self)

	return property(getter, setter)


def _positive_fraction (value: typing.Any) -> germline.fraction.Fraction:

	fraction = germline.fraction.to_fraction(value)

	if fraction <= 0:
		raise germline.errors.ConfigurationError(f"Expected a positive value, got {fraction}")

	return fraction


def _optional_positive_fraction (value: typing.Any) -> typing.Optional[germline.fraction.Fraction]:
	return None if value is None else _positive_fraction(value)


def _time_signature (value: typing.Any) -> germline.time_signature.TimeSignature:

	if isinstance(value, str):
		return germline.time_signature.TimeSignature.parse(value)

	return value


def _tempo (value: int) -> int:

	if value < 1:
		raise germline.errors.ConfigurationError(f"Tempo must be positive, got {value}")

	return value


class Voice:

	"""
	One melodic line: an octave offset and a speed applied to the germ.

	``speed_scale_factor`` is a speed multiplier, so a factor of 2 plays the
	germ twice as fast (durations halved).
	"""

	octave_adjustment = _observed("octave_adjustment", int)
	speed_scale_factor = _observed("speed_scale_factor", _positive_fraction)
	instrument_name = _observed("instrument_name", str)

	def __init__ (
		self,
		piece: "FractalPiece",
		octave_adjustment: int = 0,
		speed_scale_factor: typing.Any = 1,
		instrument_name: str = DEFAULT_INSTRUMENT
	) -> None:

		self.piece = piece
		self.events = germline.event_emitter.EventEmitter()
		self._modified_germ: typing.Optional[germline.note.NoteList] = None
		self.events.on("changed", lambda voice: self.clear_modified_germ())

		self.octave_adjustment = octave_adjustment
		self.speed_scale_factor = speed_scale_factor
		self.instrument_name = instrument_name

	@property
	def channel (self) -> int:

		"""The 0-based MIDI channel, equal to the voice's position in the piece."""

		return self.piece.voices.index(self)

	@property
	def modified_germ (self) -> germline.note.NoteList:

		"""The piece's germ shifted by the octave adjustment and sped up by the speed factor."""

		if self._modified_germ is None:
			shifted = germline.transformers.Octave(self.octave_adjustment)(self.piece.germ)
			self._modified_germ = germline.transformers.RhythmicDuration(1 / self.speed_scale_factor)(shifted)
			self._modified_germ.instrument = self.instrument_name

		return self._modified_germ

	def clear_modified_germ (self) -> None:
		self._modified_germ = None

	@property
	def voice_sections (self) -> typing.List["VoiceSection"]:
		return [self.piece.voice_section(self, section) for section in self.piece.sections]

	def __repr__ (self) -> str:
		return f"Voice(octave_adjustment={self.octave_adjustment}, speed_scale_factor={self.speed_scale_factor}, instrument_name={self.instrument_name!r})"


class Section:

	"""
	A time span of the piece with its own transformation settings.

	Without a declared ``duration`` the section lasts as long as the longest
	result among the voices that play in it.
	"""

	self_similarity = _observed("self_similarity")
	apply_inversion = _observed("apply_inversion", bool)
	apply_retrograde = _observed("apply_retrograde", bool)
	scale = _observed("scale")
	declared_duration = _observed("declared_duration", _optional_positive_fraction)

	def __init__ (
		self,
		piece: "FractalPiece",
		self_similarity: typing.Optional[germline.self_similarity.SelfSimilaritySettings] = None,
		apply_inversion: bool = False,
		apply_retrograde: bool = False,
		scale: typing.Optional[germline.scales.Scale] = None,
		duration: typing.Any = None
	) -> None:

		self.piece = piece
		self.events = germline.event_emitter.EventEmitter()

		self.self_similarity = self_similarity if self_similarity is not None else germline.self_similarity.SelfSimilaritySettings(False, False, False)
		self.apply_inversion = apply_inversion
		self.apply_retrograde = apply_retrograde
		self.scale = scale
		self.declared_duration = duration

	@property
	def effective_scale (self) -> germline.scales.Scale:
		return self.scale if self.scale is not None else self.piece.scale

	@property
	def voice_sections (self) -> typing.List["VoiceSection"]:
		return [self.piece.voice_section(voice, self) for voice in self.piece.voices]

	@property
	def duration (self) -> germline.fraction.Fraction:

		if self.declared_duration is not None:
			return self.declared_duration

		durations = [vs.result.duration for vs in self.voice_sections if not vs.rest]

		if durations:
			return max(durations)

		return self.piece.longest_modified_germ_duration()

	def set_self_similarity_on_all_voice_sections (
		self,
		apply_to_pitch: bool,
		apply_to_rhythm: bool,
		apply_to_volume: bool,
		iterations: int = 1
	) -> None:

		self.self_similarity = germline.self_similarity.SelfSimilaritySettings(apply_to_pitch, apply_to_rhythm, apply_to_volume, iterations)

	def transformers (self) -> typing.List[germline.transformers.Transformer]:

		"""Return the transformers that turn a voice's modified germ into this section's result.

		Inversion and retrograde reshape the germ itself, so the self-similar
		expansion is built from the inverted or reversed germ.
		"""

		steps: typing.List[germline.transformers.Transformer] = []

		if self.apply_inversion and self.apply_retrograde:
			steps.append(germline.transformers.RetrogradeInversion())
		elif self.apply_inversion:
			steps.append(germline.transformers.Inversion())
		elif self.apply_retrograde:
			steps.append(germline.transformers.Retrograde())

		if self.self_similarity.is_active:
			steps.append(germline.self_similarity.SelfSimilarityTransformer(self.self_similarity))

		return steps

	def __repr__ (self) -> str:
		return f"Section(self_similarity={self.self_similarity}, apply_inversion={self.apply_inversion}, apply_retrograde={self.apply_retrograde}, scale={self.scale})"


class VoiceSection:

	"""
	What one voice plays during one section.
	"""

	rest = _observed("rest", bool)

	def __init__ (self, voice: Voice, section: Section, rest: bool = False) -> None:

		self.voice = voice
		self.section = section
		self.events = germline.event_emitter.EventEmitter()
		self._result: typing.Optional[germline.note.NoteList] = None
		self.events.on("changed", lambda voice_section: self.clear())

		self.rest = rest

	def clear (self) -> None:
		self._result = None

	@property
	def result (self) -> germline.note.NoteList:

		"""The transformed modified germ, tagged with this voice section as its source.

		A resting voice section has a single rest lasting the whole section.
		"""

		if self.rest:
			return self.lengthened_result(self.section.duration)

		if self._result is None:
			self._result = self._generate()

		return self._result

	def _generate (self) -> germline.note.NoteList:

		try:
			notes = self.voice.modified_germ

			if self.section.scale is not None:
				notes = notes.with_scale(self.section.scale)

			for transformer in self.section.transformers():
				notes = transformer(notes)

		except germline.errors.GermlineError as exc:
			raise type(exc)(f"Voice {self._voice_label()}, section {self._section_label()}: {exc}") from exc

		logger.debug(f"Generated voice {self._voice_label()}, section {self._section_label()}: {len(notes)} notes")

		result = notes.with_source_voice_section(self)
		result.instrument = self.voice.instrument_name

		return result

	def lengthened_result (self, duration: germline.fraction.Fraction) -> germline.note.NoteList:

		"""Return the result repeated, then cut, so it lasts exactly ``duration``.

		Only the final note is shortened when the cut falls inside it.
		"""

		if self.rest:
			return germline.note.NoteList(
				[germline.note.Note.rest(duration, self)],
				instrument = self.voice.instrument_name
			)

		result = self.result
		lengthened = germline.note.NoteList(instrument=result.instrument)

		if result.duration <= 0:
			raise germline.errors.PreconditionError(
				f"Voice {self._voice_label()}, section {self._section_label()}: cannot fill {duration} with a result of no duration"
			)

		elapsed = germline.fraction.ZERO

		while elapsed < duration:

			for note in result:

				remaining = duration - elapsed

				if remaining <= 0:
					break

				if note.duration > remaining:
					note = dataclasses.replace(note, duration=remaining)

				lengthened.append(note)
				elapsed += note.duration

		return lengthened

	def _voice_label (self) -> str:

		if self.voice in self.voice.piece.voices:
			return str(self.voice.channel + 1)

		return "?"

	def _section_label (self) -> str:

		if self.section in self.section.piece.sections:
			return str(self.section.piece.sections.index(self.section) + 1)

		return "layer"


class FractalPiece:

	"""
	A complete piece: germ, scale, meter, tempo, voices and sections.

	Example:
		```python
		piece = FractalPiece("C4,1/8 E4 G4", germline.scales.major("C"))
		voice = piece.create_voice(octave_adjustment=1)
		section = piece.create_section()
		section.set_self_similarity_on_all_voice_sections(True, True, True)
		result = piece.generate()
		```
	"""

	germ_string = _observed("germ_string", str)
	scale = _observed("scale")
	time_signature = _observed("time_signature", _time_signature)
	tempo = _observed("tempo", _tempo)
	generate_layered_intro = _observed("generate_layered_intro", bool)
	generate_layered_outro = _observed("generate_layered_outro", bool)

	def __init__ (
		self,
		germ_string: str = "",
		scale: germline.scales.Scale = germline.scales.DEFAULT_SCALE,
		time_signature: typing.Any = germline.time_signature.DEFAULT,
		tempo: int = germline.constants.midi.DEFAULT_TEMPO,
		generate_layered_intro: bool = True,
		generate_layered_outro: bool = True
	) -> None:

		self.events = germline.event_emitter.EventEmitter()
		self.voices: typing.List[Voice] = []
		self.sections: typing.List[Section] = []
		self._voice_sections: typing.Dict[typing.Tuple[Voice, Section], VoiceSection] = {}
		self._germ: typing.Optional[germline.note.NoteList] = None
		self.events.on("changed", self._on_piece_changed)

		self.germ_string = germ_string
		self.scale = scale
		self.time_signature = time_signature
		self.tempo = tempo
		self.generate_layered_intro = generate_layered_intro
		self.generate_layered_outro = generate_layered_outro

	@property
	def germ (self) -> germline.note.NoteList:

		"""The parsed germ (cached until the germ string or scale changes)."""

		if self._germ is None:
			self._germ = germline.note.parse_note_list(self.germ_string, self.scale)

		return self._germ

	def _on_piece_changed (self, piece: "FractalPiece") -> None:

		self._germ = None

		for voice in self.voices:
			voice.clear_modified_germ()

		for voice_section in self._voice_sections.values():
			voice_section.clear()

	def _on_voice_changed (self, voice: Voice) -> None:

		for section in self.sections:
			self._voice_sections[(voice, section)].clear()

	def _on_section_changed (self, section: Section) -> None:

		for voice in self.voices:
			self._voice_sections[(voice, section)].clear()

	def voice_section (self, voice: Voice, section: Section) -> VoiceSection:
		return self._voice_sections[(voice, section)]

	def create_voice (
		self,
		octave_adjustment: int = 0,
		speed_scale_factor: typing.Any = 1,
		instrument_name: str = DEFAULT_INSTRUMENT
	) -> Voice:

		"""Add a voice on the next free channel.

		Raises:
			ConfigurationError: If every MIDI channel is already in use.
		"""

		if len(self.voices) >= germline.constants.midi.MAX_CHANNELS:
			raise germline.errors.ConfigurationError(f"A piece can have at most {germline.constants.midi.MAX_CHANNELS} voices")

		voice = Voice(self, octave_adjustment, speed_scale_factor, instrument_name)
		voice.events.on("changed", self._on_voice_changed)
		self.voices.append(voice)

		for section in self.sections:
			self._voice_sections[(voice, section)] = VoiceSection(voice, section)

		return voice

	def create_section (
		self,
		self_similarity: typing.Optional[germline.self_similarity.SelfSimilaritySettings] = None,
		apply_inversion: bool = False,
		apply_retrograde: bool = False,
		scale: typing.Optional[germline.scales.Scale] = None,
		duration: typing.Any = None
	) -> Section:

		section = Section(self, self_similarity, apply_inversion, apply_retrograde, scale, duration)
		section.events.on("changed", self._on_section_changed)
		self.sections.append(section)

		for voice in self.voices:
			self._voice_sections[(voice, section)] = VoiceSection(voice, section)

		return section

	def remove_voice (self, voice: Voice) -> None:

		self.voices.remove(voice)
		voice.events.off("changed", self._on_voice_changed)

		for section in self.sections:
			del self._voice_sections[(voice, section)]

	def remove_section (self, section: Section) -> None:

		self.sections.remove(section)
		section.events.off("changed", self._on_section_changed)

		for voice in self.voices:
			del self._voice_sections[(voice, section)]

	def create_default_voices (self) -> None:

		"""Add a fast high voice, a middle voice and a slow low voice."""

		self.create_voice(octave_adjustment=1, speed_scale_factor=2)
		self.create_voice(octave_adjustment=0, speed_scale_factor=1)
		self.create_voice(octave_adjustment=-1, speed_scale_factor=germline.fraction.Fraction(1, 2))

	def create_default_sections (self) -> None:

		"""Add four self-similar sections: plain, inverted, retrograde inverted and retrograde."""

		for apply_inversion, apply_retrograde in ((False, False), (True, False), (True, True), (False, True)):
			self.create_section(
				self_similarity = germline.self_similarity.SelfSimilaritySettings(True, True, True, 1),
				apply_inversion = apply_inversion,
				apply_retrograde = apply_retrograde
			)

	def create_default_settings (self) -> None:

		"""Replace all voices and sections with the defaults and turn on the layered intro and outro."""

		for voice in list(self.voices):
			self.remove_voice(voice)

		for section in list(self.sections):
			self.remove_section(section)

		self.create_default_voices()
		self.create_default_sections()
		self.generate_layered_intro = True
		self.generate_layered_outro = True

	def longest_modified_germ_duration (self) -> germline.fraction.Fraction:

		longest = germline.fraction.ZERO

		for number, voice in enumerate(self.voices, start=1):
			try:
				longest = max(longest, voice.modified_germ.duration)
			except germline.errors.GermlineError as exc:
				raise type(exc)(f"Voice {number}: {exc}") from exc

		return longest

	def arrangement (self) -> typing.List[typing.Tuple[Section, typing.Optional[typing.Callable[[int], bool]]]]:

		"""Return every section in time order, layered intro and outro included.

		Each section comes with a rule telling whether the voice at a given index
		rests in it (``None`` for the piece's own sections, where each voice
		section decides).
		"""

		count = len(self.voices)
		layer_duration = germline.fraction.ZERO

		if count and (self.generate_layered_intro or self.generate_layered_outro):
			layer_duration = self.longest_modified_germ_duration()

		layers = count if layer_duration > 0 else 0
		arrangement: typing.List[typing.Tuple[Section, typing.Optional[typing.Callable[[int], bool]]]] = []

		if self.generate_layered_intro:
			for j in range(layers):
				arrangement.append((Section(self, duration=layer_duration), lambda index, j=j: index < count - 1 - j))

		arrangement.extend((section, None) for section in self.sections)

		if self.generate_layered_outro:
			for j in range(layers):
				arrangement.append((Section(self, duration=layer_duration), lambda index, j=j: index < j))

		return arrangement

	def _check_germ (self) -> None:

		if not self.germ:
			raise germline.errors.GermIsEmptyError("The germ is empty; enter at least one note")

	def entire_voice (self, voice: Voice) -> germline.note.NoteList:

		"""Concatenate everything the voice plays, merging adjacent rests of the same voice section.

		Raises:
			GermIsEmptyError: If the piece has no germ.
		"""

		self._check_germ()
		index = self.voices.index(voice)
		notes = germline.note.NoteList(instrument=voice.instrument_name)

		for section, rests in self.arrangement():

			if rests is None:
				voice_section = self.voice_section(voice, section)
			else:
				voice_section = VoiceSection(voice, section, rest=rests(index))

			notes.extend(voice_section.lengthened_result(section.duration))

		return notes.normalized_rests()

	def section_scales (self) -> typing.List[typing.Tuple[germline.fraction.Fraction, germline.scales.Scale]]:

		"""Return ``(start time, scale)`` for every section in time order, layers included."""

		starts: typing.List[typing.Tuple[germline.fraction.Fraction, germline.scales.Scale]] = []
		elapsed = germline.fraction.ZERO

		for section, _ in self.arrangement():
			starts.append((elapsed, section.effective_scale))
			elapsed += section.duration

		return starts

	def generate (self, max_resolution: int = germline.fraction.MAX_ALLOWED_DURATION_DENOM) -> germline.resolution.PieceResult:

		"""Assemble every voice and resolve the piece to integer ticks.

		Raises:
			GermIsEmptyError: If the piece has no germ.
			ResolutionError: If no power-of-two rescale brings the tick resolution under ``max_resolution``.
		"""

		self._check_germ()

		voices = [(voice.channel, voice.instrument_name, self.entire_voice(voice)) for voice in self.voices]

		result = germline.resolution.build_result(
			voices,
			tempo = self.tempo,
			time_signature = self.time_signature,
			section_scales = self.section_scales(),
			max_resolution = max_resolution
		)

		logger.info(
			f"Generated {len(voices)} voices over {len(self.sections)} sections at {result.ticks_per_quarter} ticks per quarter"
		)

		return result
