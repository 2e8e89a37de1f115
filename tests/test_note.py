import pytest

import germline.errors
import germline.fraction
import germline.note
import germline.scales

import conftest


Fraction = germline.fraction.Fraction
Note = germline.note.Note
NoteList = germline.note.NoteList


def test_parse_single_note (c_major: germline.scales.Scale) -> None:

	"""Letter, accidental, octave, duration and dynamic are all read."""

	note = germline.note.parse_note("F#4,1/8,FF", c_major)

	assert (note.scale_step, note.octave, note.chromatic_adjustment) == (3, 4, 1)
	assert note.duration == Fraction(1, 8)
	assert note.volume == 112
	assert note.midi_pitch == 66


def test_parse_rest (c_major: germline.scales.Scale) -> None:

	rest = germline.note.parse_note("R,1/8", c_major)

	assert rest.is_rest
	assert rest.duration == Fraction(1, 8)
	assert rest.midi_pitch is None
	assert rest.volume == 0


def test_parse_numeric_volume_and_lowercase (c_major: germline.scales.Scale) -> None:

	note = germline.note.parse_note("bb3,3/16,90", c_major)

	assert note.midi_pitch == 58
	assert note.volume == 90
	assert note.duration == Fraction(3, 16)


def test_parse_list_inherits_previous_values (c_major: germline.scales.Scale) -> None:

	"""Missing durations and volumes repeat the previous note's."""

	notes = germline.note.parse_note_list("C4 D4,1/8 E4 F4,,P R G4", c_major)

	assert conftest.durations(notes) == [Fraction(1, 4)] + [Fraction(1, 8)] * 5
	assert [note.volume for note in notes] == [80, 80, 80, 49, 0, 49]
	assert conftest.pitches(notes) == [60, 62, 64, 65, None, 67]


def test_parse_list_marks_first_note (simple_germ: NoteList) -> None:

	assert [note.is_first_note_of_germ_copy for note in simple_germ] == [True, False, False, False]
	assert simple_germ.duration == Fraction(3, 4)


def test_parse_empty_string_gives_empty_list (c_major: germline.scales.Scale) -> None:

	assert germline.note.parse_note_list("   ", c_major) == NoteList()


@pytest.mark.parametrize("text", ["H4", "C", "C4,abc", "C4,1/4,LOUD", "C4,1/4,MF,extra", "4C"])
def test_parse_errors (c_major: germline.scales.Scale, text: str) -> None:

	"""Text that is not a note string is a parse failure."""

	with pytest.raises(germline.errors.NoteStringParseError):
		germline.note.parse_note(text, c_major)


@pytest.mark.parametrize("text", ["C4,1/0", "C4,0", "C4,-1/4", "C4,1/4,200"])
def test_invalid_values_are_validation_errors (c_major: germline.scales.Scale, text: str) -> None:

	"""Well-formed notes with impossible values fail validation, not parsing."""

	with pytest.raises(germline.errors.InvalidNoteError):
		germline.note.parse_note(text, c_major)


def test_note_validation () -> None:

	with pytest.raises(germline.errors.InvalidNoteError):
		Note(duration=-1)

	with pytest.raises(germline.errors.InvalidNoteError):
		Note(volume=128)

	with pytest.raises(germline.errors.InvalidNoteError):
		Note(scale=None)


def test_scale_step_is_normalized_into_the_octave (c_major: germline.scales.Scale) -> None:

	high = Note(scale_step=9, octave=4, scale=c_major)
	low = Note(scale_step=-1, octave=4, scale=c_major)

	assert (high.scale_step, high.octave, high.midi_pitch) == (2, 5, 76)
	assert (low.scale_step, low.octave, low.midi_pitch) == (6, 3, 59)


def test_absolute_scale_step (c_major: germline.scales.Scale) -> None:

	note = Note(0, 4, scale=c_major)

	assert note.absolute_scale_step == 28
	assert note.with_absolute_scale_step(30).midi_pitch == 64
	assert Note.rest(1).with_absolute_scale_step(5).is_rest


def test_duration_is_coerced_to_fraction () -> None:

	note = Note(duration="3/8")

	assert isinstance(note.duration, Fraction)
	assert note.duration == Fraction(3, 8)


def test_equality_ignores_source_voice_section () -> None:

	assert Note.rest(1, source_voice_section=object()) == Note.rest(1, source_voice_section=object())


def test_note_list_basics (c_major: germline.scales.Scale) -> None:

	notes = NoteList([Note.rest(Fraction(1, 8)), Note(2, 4, 0, Fraction(1, 4))], instrument="Flute")
	clone = notes.clone()

	assert notes.duration == Fraction(3, 8)
	assert notes.first_audible_note().midi_pitch == 64
	assert clone == notes
	assert clone is not notes
	assert clone.instrument == "Flute"
	assert NoteList([Note.rest(1)]).first_audible_note() is None
	assert NoteList().duration == 0


def test_single_scale_rejects_mixed_scales (c_major: germline.scales.Scale, g_major: germline.scales.Scale) -> None:

	notes = NoteList([Note(scale=c_major), Note.rest(1), Note(scale=g_major)])

	assert notes.scales() == [c_major, g_major]

	with pytest.raises(germline.errors.InconsistentScaleError):
		notes.single_scale()


def test_with_scale_keeps_steps_and_octaves (g_major: germline.scales.Scale) -> None:

	notes = germline.note.parse_note_list("G4 A4 R B4", g_major)
	c_minor = germline.scales.natural_minor("C")

	assert conftest.pitches(notes.with_scale(c_minor)) == [60, 62, None, 63]
	assert conftest.pitches(notes) == [67, 69, None, 71]


def test_with_scale_wraps_steps_into_smaller_scales (g_major: germline.scales.Scale) -> None:

	notes = germline.note.parse_note_list("F#4", g_major)
	pentatonic = germline.scales.major_pentatonic("G")

	assert conftest.pitches(notes.with_scale(pentatonic)) == [81]


def test_normalized_rests_respects_sources (c_major: germline.scales.Scale) -> None:

	"""Adjacent rests merge only when they come from the same voice section."""

	first = object()
	second = object()

	notes = NoteList([
		Note.rest(Fraction(1, 8), first),
		Note.rest(Fraction(1, 8), first),
		Note.rest(Fraction(1, 4), second),
		Note(duration=Fraction(1, 4)),
		Note.rest(Fraction(1, 4), second),
		Note.rest(Fraction(1, 4), second),
	])

	normalized = notes.normalized_rests()

	assert conftest.durations(normalized) == [Fraction(1, 4), Fraction(1, 4), Fraction(1, 4), Fraction(1, 2)]
	assert normalized[0].source_voice_section is first
	assert normalized.duration == notes.duration


def test_number_of_accidentals (c_major: germline.scales.Scale) -> None:

	notes = germline.note.parse_note_list("C4 F#4 Bb4 G4", c_major)

	assert notes.number_of_accidentals() == 2


def test_with_first_notes_of_germ_copy (simple_germ: NoteList) -> None:

	flagged = simple_germ.with_first_notes_of_germ_copy(1, 3)

	assert [note.is_first_note_of_germ_copy for note in flagged] == [False, True, False, True]
	assert simple_germ[0].is_first_note_of_germ_copy
