import pytest

import germline.errors
import germline.fraction
import germline.note
import germline.scales
import germline.self_similarity
import germline.transformers

import conftest


Fraction = germline.fraction.Fraction
Note = germline.note.Note
NoteList = germline.note.NoteList


@pytest.fixture
def phrase () -> NoteList:

	"""Five notes and a trailing rest in C major."""

	return NoteList([
		Note(0, 4, 0, Fraction(1, 1), 96),
		Note(5, 4, 0, Fraction(1, 2), 64),
		Note(2, 4, 0, Fraction(1, 2), 112),
		Note(1, 4, 0, Fraction(1, 2), 112),
		Note(0, 4, 0, Fraction(1, 1), 96),
		Note.rest(Fraction(1, 2)),
	])


def test_copy_is_equal_but_independent (phrase: NoteList) -> None:

	copied = germline.transformers.Copy()(phrase)

	assert copied == phrase
	assert copied is not phrase


def test_retrograde_reverses (phrase: NoteList) -> None:

	expected = NoteList([
		Note.rest(Fraction(1, 2)),
		Note(0, 4, 0, Fraction(1, 1), 96),
		Note(1, 4, 0, Fraction(1, 2), 112),
		Note(2, 4, 0, Fraction(1, 2), 112),
		Note(5, 4, 0, Fraction(1, 2), 64),
		Note(0, 4, 0, Fraction(1, 1), 96),
	])

	assert germline.transformers.Retrograde().transform(phrase) == expected


def test_retrograde_is_an_involution (phrase: NoteList, simple_germ: NoteList) -> None:

	"""Reversing twice restores notes and germ copy markers."""

	retrograde = germline.transformers.Retrograde()

	for notes in (phrase, simple_germ, simple_germ.with_first_notes_of_germ_copy(0, 2), NoteList()):
		assert retrograde(retrograde(notes)) == notes


def test_retrograde_keeps_copy_boundaries (simple_germ: NoteList) -> None:

	"""A list of equal-length copies still has its markers at the copy starts."""

	notes = NoteList(list(simple_germ) * 3).with_first_notes_of_germ_copy(0, 4, 8)
	reversed_notes = germline.transformers.Retrograde()(notes)

	assert [i for i, note in enumerate(reversed_notes) if note.is_first_note_of_germ_copy] == [0, 4, 8]


def test_inversion (c_major: germline.scales.Scale) -> None:

	"""Steps and accidentals mirror around the first note."""

	notes = germline.note.parse_note_list("C4,1/8 G4 F#4 B4 A#4 Eb4 D4 B3", c_major)
	inverted = germline.transformers.Inversion()(notes)

	assert conftest.pitches(inverted) == [60, 53, 54, 50, 51, 58, 59, 62]
	assert conftest.durations(inverted) == conftest.durations(notes)


def test_inversion_is_an_involution (c_major: germline.scales.Scale) -> None:

	notes = germline.note.parse_note_list("R,1/8 E4,1/8 G4 F#4 B4 A#4 R Eb4 D4 B3", c_major)
	inversion = germline.transformers.Inversion()

	assert inversion(inversion(notes)) == notes


def test_inversion_without_audible_notes () -> None:

	rests = NoteList([Note.rest(1), Note.rest(2)])

	assert germline.transformers.Inversion()(rests) == rests
	assert germline.transformers.Inversion()(NoteList()) == NoteList()


def test_inversion_requires_one_scale (c_major: germline.scales.Scale, g_major: germline.scales.Scale) -> None:

	notes = NoteList([Note(scale=c_major), Note(2, scale=g_major)])

	with pytest.raises(germline.errors.InconsistentScaleError):
		germline.transformers.Inversion()(notes)


def test_retrograde_inversion_commutes (c_major: germline.scales.Scale) -> None:

	"""Inverting around the original first note commutes with reversing."""

	notes = germline.note.parse_note_list("C4,1/8 G4 R F#4 B4,1/4 A#4", c_major)
	origin = notes.first_audible_note()
	inversion = germline.transformers.Inversion(origin)
	retrograde = germline.transformers.Retrograde()

	expected = germline.transformers.RetrogradeInversion()(notes)

	assert retrograde(inversion(notes)) == expected
	assert inversion(retrograde(notes)) == expected
	assert conftest.pitches(expected) == [51, 50, 54, None, 53, 60]


def test_octave (simple_germ: NoteList) -> None:

	up = germline.transformers.Octave(1)(simple_germ)
	down = germline.transformers.Octave(-2)(simple_germ)

	assert conftest.pitches(up) == [79, 81, 83, 79]
	assert conftest.pitches(down) == [43, 45, 47, 43]
	assert germline.transformers.Octave(3)(NoteList([Note.rest(1)])) == NoteList([Note.rest(1)])


def test_rhythmic_duration_is_exact () -> None:

	notes = NoteList([Note(duration=Fraction(1, 3)), Note.rest(Fraction(2, 3))])
	tripled = germline.transformers.RhythmicDuration(3)(notes)

	assert conftest.durations(tripled) == [Fraction(1), Fraction(2)]


@pytest.mark.parametrize("factor", [Fraction(7, 5), Fraction(1, 3), 2, Fraction(-1, 1) * -9])
def test_rhythmic_duration_inverse_restores (simple_germ: NoteList, factor: Fraction) -> None:

	forward = germline.transformers.RhythmicDuration(factor)
	backward = germline.transformers.RhythmicDuration(1 / germline.fraction.to_fraction(factor))

	assert backward(forward(simple_germ)) == simple_germ


@pytest.mark.parametrize("factor", [0, -1, Fraction(-1, 2)])
def test_rhythmic_duration_rejects_non_positive (factor: Fraction) -> None:

	with pytest.raises(germline.errors.PreconditionError):
		germline.transformers.RhythmicDuration(factor)


def test_volume () -> None:

	notes = NoteList([Note(volume=80), Note.rest(1), Note(volume=0)])

	assert [note.volume for note in germline.transformers.Volume(0.5)(notes)] == [104, 0, 64]
	assert [note.volume for note in germline.transformers.Volume(-0.5)(notes)] == [40, 0, 0]
	assert [note.volume for note in germline.transformers.Volume(1)(notes)] == [127, 0, 127]

	with pytest.raises(germline.errors.PreconditionError):
		germline.transformers.Volume(1.5)


def test_transposition (c_major: germline.scales.Scale) -> None:

	notes = germline.note.parse_note_list("C4 R E4 B4", c_major)
	moved = germline.transformers.Transposition(2, 1)(notes)

	assert conftest.pitches(moved) == [65, None, 68, 75]
	assert moved[0].segment_chromatic_adjustment == 1


def test_transformers_do_not_modify_their_input (simple_germ: NoteList) -> None:

	before = simple_germ.clone()

	for transformer in (
		germline.transformers.Octave(1),
		germline.transformers.RhythmicDuration(2),
		germline.transformers.Retrograde(),
		germline.transformers.Inversion(),
		germline.transformers.RetrogradeInversion(),
		germline.transformers.Volume(0.3),
	):
		transformer(simple_germ)

	assert simple_germ == before


def test_base_transformer_is_abstract () -> None:

	with pytest.raises(NotImplementedError):
		germline.transformers.Transformer()(NoteList())


def test_transposition_drops_accidentals_that_cross_a_letter (c_major: germline.scales.Scale) -> None:

	notes = germline.note.parse_note_list("C4 F#4 A#4 Eb4", c_major)

	# A#4 up four steps would be E#5; Eb4 down two would be Cb4.
	assert conftest.pitches(germline.transformers.Transposition(4)(notes)) == [67, 73, 76, 70]
	assert conftest.pitches(germline.transformers.Transposition(-2)(notes)) == [57, 63, 66, 60]
	assert conftest.pitches(germline.transformers.Transposition(0)(notes)) == [60, 66, 70, 63]


def test_retrograde_keeps_copy_starts_on_a_self_similar_result (c_major: germline.scales.Scale) -> None:

	germ = germline.note.parse_note_list("C4 D4", c_major)
	expanded = germline.self_similarity.SelfSimilarityTransformer(
		germline.self_similarity.SelfSimilaritySettings(True, False, False)
	)(germ)
	reversed_notes = germline.transformers.Retrograde()(expanded)

	assert conftest.pitches(reversed_notes) == [64, 62, 62, 60]
	assert [note.is_first_note_of_germ_copy for note in expanded] == [True, False, True, False]
	assert [note.is_first_note_of_germ_copy for note in reversed_notes] == [True, False, True, False]
