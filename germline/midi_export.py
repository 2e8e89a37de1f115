"""Render a tick-resolved piece as an in-memory ``mido.MidiFile``.

Track 0 carries the meter, key signatures and tempo; every voice gets its
own track on its own channel. Instrument names are resolved to General MIDI
program numbers by a caller-supplied lookup, since the sound bank is not
known here. Writing the file is left to the caller (``MidiFile.save``).
"""

import logging
import typing

import mido

import germline.resolution


logger = logging.getLogger(__name__)


def _absolute_to_delta (events: typing.List[typing.Tuple[int, int, mido.Message]]) -> mido.MidiTrack:

	"""Sort ``(tick, order, message)`` events and convert their ticks to delta times."""

	track = mido.MidiTrack()
	last_tick = 0

	for tick, _, message in sorted(events, key=lambda event: (event[0], event[1])):
		message.time = tick - last_tick
		track.append(message)
		last_tick = tick

	return track


def _conductor_track (result: germline.resolution.PieceResult) -> mido.MidiTrack:

	events: typing.List[typing.Tuple[int, int, mido.Message]] = [
		(0, 0, mido.MetaMessage(
			'time_signature',
			numerator = result.time_signature.numerator,
			denominator = result.time_signature.denominator
		)),
		(0, 1, mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(result.effective_tempo))),
	]

	for change in result.key_signature_changes:
		events.append((change.tick, 2, mido.MetaMessage('key_signature', key=change.key_signature.midi_key)))

	return _absolute_to_delta(events)


def _voice_track (
	voice: germline.resolution.VoiceTimeline,
	program_for: typing.Optional[typing.Callable[[str], typing.Optional[int]]]
) -> mido.MidiTrack:

	events: typing.List[typing.Tuple[int, int, mido.Message]] = []

	if program_for is not None and voice.instrument_name is not None:
		program = program_for(voice.instrument_name)

		if program is not None:
			events.append((0, 0, mido.Message('program_change', channel=voice.channel, program=program)))

	for note in voice.notes:
		# note_off sorts before note_on at the same tick so repeated pitches retrigger.
		events.append((note.start_tick, 2, mido.Message('note_on', channel=note.channel, note=note.pitch, velocity=note.volume)))
		events.append((note.start_tick + note.duration_ticks, 1, mido.Message('note_off', channel=note.channel, note=note.pitch, velocity=0)))

	track = _absolute_to_delta(events)

	if track:
		track.append(mido.MetaMessage('end_of_track', time=max(0, voice.end_tick - sum(message.time for message in track))))

	return track


def build_midi_file (
	result: germline.resolution.PieceResult,
	program_for: typing.Optional[typing.Callable[[str], typing.Optional[int]]] = None
) -> mido.MidiFile:

	"""Build a type 1 MIDI file from a piece result.

	Parameters:
		result: Output of :meth:`germline.piece.FractalPiece.generate`.
		program_for: Optional lookup from instrument name to a General MIDI
			program number (0-127); ``None`` skips the program change.

	Example:
		```python
		midi_file = build_midi_file(piece.generate())
		midi_file.save("piece.mid")
		```
	"""

	midi_file = mido.MidiFile(type=1, ticks_per_beat=result.ticks_per_quarter)
	midi_file.tracks.append(_conductor_track(result))

	for voice in result.voices:
		midi_file.tracks.append(_voice_track(voice, program_for))

	logger.debug(f"Built MIDI file with {len(midi_file.tracks)} tracks at {result.ticks_per_quarter} ticks per beat")

	return midi_file
