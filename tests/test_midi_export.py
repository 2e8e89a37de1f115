import mido

import germline.midi_export
import germline.piece


def track_messages (track: mido.MidiTrack, message_type: str) -> list:
	return [message for message in track if message.type == message_type]


def test_tracks_and_resolution (simple_piece: germline.piece.FractalPiece) -> None:

	result = simple_piece.generate()
	midi_file = germline.midi_export.build_midi_file(result)

	assert midi_file.type == 1
	assert midi_file.ticks_per_beat == result.ticks_per_quarter
	assert len(midi_file.tracks) == 4


def test_conductor_track (simple_piece: germline.piece.FractalPiece) -> None:

	simple_piece.time_signature = "3/4"
	simple_piece.tempo = 120
	conductor = germline.midi_export.build_midi_file(simple_piece.generate()).tracks[0]

	time_signature = track_messages(conductor, 'time_signature')[0]

	assert (time_signature.numerator, time_signature.denominator) == (3, 4)
	assert track_messages(conductor, 'set_tempo')[0].tempo == mido.bpm2tempo(120)
	assert [message.key for message in track_messages(conductor, 'key_signature')] == ["G"]


def test_voice_tracks_hold_every_note (simple_piece: germline.piece.FractalPiece) -> None:

	result = simple_piece.generate()
	midi_file = germline.midi_export.build_midi_file(result)

	for voice, track in zip(result.voices, midi_file.tracks[1:]):

		note_ons = track_messages(track, 'note_on')

		assert len(note_ons) == len(voice.notes)
		assert len(track_messages(track, 'note_off')) == len(voice.notes)
		assert [message.note for message in note_ons] == [note.pitch for note in voice.notes]
		assert {message.channel for message in note_ons} == {voice.channel}
		assert sum(message.time for message in track) == voice.end_tick


def test_note_off_precedes_repeated_note_on (simple_piece: germline.piece.FractalPiece) -> None:

	"""Back-to-back notes release before the next attack at the same tick."""

	track = germline.midi_export.build_midi_file(simple_piece.generate()).tracks[1]
	note_messages = [message for message in track if message.type in ('note_on', 'note_off')]

	assert [message.type for message in note_messages[:4]] == ['note_on', 'note_off', 'note_on', 'note_off']
	assert note_messages[2].time == 0


def test_program_lookup (simple_piece: germline.piece.FractalPiece) -> None:

	programs = {"Piano": 0, "Violin": 40}
	simple_piece.voices[0].instrument_name = "Violin"
	simple_piece.voices[1].instrument_name = "Theremin"

	midi_file = germline.midi_export.build_midi_file(simple_piece.generate(), programs.get)

	assert [message.program for message in track_messages(midi_file.tracks[1], 'program_change')] == [40]
	assert track_messages(midi_file.tracks[2], 'program_change') == []
	assert [message.program for message in track_messages(midi_file.tracks[3], 'program_change')] == [0]


def test_stretched_piece_raises_the_tempo (simple_piece: germline.piece.FractalPiece) -> None:

	result = simple_piece.generate(max_resolution=3)
	conductor = germline.midi_export.build_midi_file(result).tracks[0]

	assert result.time_scale == 8
	assert track_messages(conductor, 'set_tempo')[0].tempo == mido.bpm2tempo(90 * 8)
