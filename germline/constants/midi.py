"""MIDI limits used by the assembly layer.

Each voice is assigned one logical channel (0-based), so a piece holds at most
``MAX_CHANNELS`` voices.
"""

MAX_CHANNELS = 16

DEFAULT_TEMPO = 90
