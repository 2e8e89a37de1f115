"""
Germline - fractal, self-similar music from a short seed melody.

A germ of a few notes is expanded by replacing every note with a copy of the
whole germ, transposed, compressed and re-weighted to match the note it
stands in for. Repeat the expansion and the melody becomes a fractal: the
same contour at every time scale. Voices play the result at different
octaves and speeds, and sections vary it with inversion, retrograde and
scale changes.

What it does:

- **Exact time.** Every duration is a ``Fraction`` of a whole note, so
  nested triplets inside quintuplets still add up exactly, however deep
  the recursion goes.
- **Structural transformers.** Octave, rhythmic scaling, volume,
  transposition, retrograde, inversion and retrograde inversion are pure
  functions over note lists; the involutions really are involutions.
- **Scales with spelling.** Major, natural and harmonic minor, both
  pentatonics and chromatic, with key signatures that refuse double sharps
  and flats.
- **Assembly.** Voices and sections are combined into one multi-voice
  timeline, optionally with a layered intro and outro, and resolved to the
  smallest tick resolution that represents every event exactly.
- **MIDI out.** The resolved piece converts to a ``mido.MidiFile``.

Minimal example:

    ```python
    import germline

    piece = germline.FractalPiece("G4,1/4 A4,1/8 B4,1/8 G4,1/4", germline.scales.major("G"))
    piece.create_default_settings()

    result = piece.generate()
    germline.midi_export.build_midi_file(result).save("fractal.mid")
    ```

Package-level exports: ``FractalPiece``, ``Fraction``, ``NoteList``,
``SelfSimilaritySettings``, ``parse_note_list``.
"""

import germline.fraction
import germline.midi_export
import germline.note
import germline.piece
import germline.scales
import germline.self_similarity


FractalPiece = germline.piece.FractalPiece
Fraction = germline.fraction.Fraction
NoteList = germline.note.NoteList
SelfSimilaritySettings = germline.self_similarity.SelfSimilaritySettings
parse_note_list = germline.note.parse_note_list
