import pytest

import germline.note
import germline.piece
import germline.scales


SIMPLE_GERM = "G4,1/4 A4,1/8 B4,1/8 G4,1/4"


@pytest.fixture
def g_major () -> germline.scales.Scale:

	"""G major, the scale most tests are written in."""

	return germline.scales.major("G")


@pytest.fixture
def c_major () -> germline.scales.Scale:

	"""C major."""

	return germline.scales.major("C")


@pytest.fixture
def simple_germ (g_major: germline.scales.Scale) -> germline.note.NoteList:

	"""A four-note germ in G major lasting three quarter notes."""

	return germline.note.parse_note_list(SIMPLE_GERM, g_major)


@pytest.fixture
def simple_piece (g_major: germline.scales.Scale) -> germline.piece.FractalPiece:

	"""The simple germ with the three default voices and one fully self-similar section."""

	piece = germline.piece.FractalPiece(SIMPLE_GERM, g_major)
	piece.create_default_voices()
	section = piece.create_section()
	section.set_self_similarity_on_all_voice_sections(True, True, True, 1)

	return piece


def pitches (notes: germline.note.NoteList) -> list:

	"""MIDI pitch of every note (None for rests)."""

	return [note.midi_pitch for note in notes]


def durations (notes: germline.note.NoteList) -> list:
	return [note.duration for note in notes]
