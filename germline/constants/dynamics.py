"""Dynamic levels and MIDI volume constants.

Volume is the MIDI attack strength (0-127). Germ strings may give a note's
volume either as an integer or as one of the dynamic names below
(``"G4,1/4,FF"``).
"""

import typing


MIN_VOLUME = 0
MAX_VOLUME = 127

DYNAMICS: typing.Dict[str, int] = {
	"PPP": 16,
	"PP": 33,
	"P": 49,
	"MP": 64,
	"MF": 80,
	"F": 96,
	"FF": 112,
	"FFF": 127,
}

DEFAULT_DYNAMIC = "MF"
DEFAULT_VOLUME = DYNAMICS[DEFAULT_DYNAMIC]


def volume_for_dynamic (name: str) -> int:

	"""
	Return the MIDI volume for a dynamic name such as ``"mf"`` (case-insensitive).
	"""

	key = name.upper()

	if key not in DYNAMICS:
		raise ValueError(f"Unknown dynamic: {name!r}. Available: {list(DYNAMICS)}")

	return DYNAMICS[key]
