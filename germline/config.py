"""Build a :class:`~germline.piece.FractalPiece` from a YAML file.

Example ``config.yaml``::

    germ: "G4,1/4 A4,1/8 B4,1/8 G4,1/4"
    scale: major
    key: G
    time_signature: "3/4"
    tempo: 90
    layered_intro: true
    layered_outro: true

    voices:
      - {octave_adjustment: 1, speed_scale_factor: 2, instrument: Violin}
      - {octave_adjustment: 0, speed_scale_factor: 1, instrument: Viola}

    sections:
      - self_similarity: {pitch: true, rhythm: true, volume: true, iterations: 1}
      - self_similarity: {pitch: true}
        inversion: true
        scale: natural_minor
        key: C
        duration: "3/4"
        resting_voices: [1]

Missing ``voices`` or ``sections`` fall back to the defaults of
:meth:`FractalPiece.create_default_voices` and
:meth:`FractalPiece.create_default_sections`.
"""

import logging
import os
import typing

import yaml

import germline.constants.midi
import germline.errors
import germline.piece
import germline.scales
import germline.self_similarity


logger = logging.getLogger(__name__)


def load_config (config_path: str = 'config.yaml') -> dict:

	"""
	Load configuration from a YAML file (an empty dict if the file does not exist).
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def _scale (config: dict, default_kind: str) -> germline.scales.Scale:
	return germline.scales.make_scale(config.get('scale', default_kind), config.get('key', 'C'))


def _self_similarity (config: typing.Optional[dict]) -> germline.self_similarity.SelfSimilaritySettings:

	if not config:
		return germline.self_similarity.SelfSimilaritySettings(False, False, False)

	return germline.self_similarity.SelfSimilaritySettings(
		apply_to_pitch = bool(config.get('pitch', False)),
		apply_to_rhythm = bool(config.get('rhythm', False)),
		apply_to_volume = bool(config.get('volume', False)),
		iterations = int(config.get('iterations', 1))
	)


def build_piece (config: dict) -> germline.piece.FractalPiece:

	"""Create a piece, its voices and its sections from a config dict.

	Raises:
		ConfigurationError: For any value the piece rejects, with the offending
			voice or section named in the message.
	"""

	try:
		piece = germline.piece.FractalPiece(
			germ_string = config.get('germ', ''),
			scale = _scale(config, 'major'),
			time_signature = str(config.get('time_signature', '4/4')),
			tempo = int(config.get('tempo', germline.constants.midi.DEFAULT_TEMPO)),
			generate_layered_intro = bool(config.get('layered_intro', True)),
			generate_layered_outro = bool(config.get('layered_outro', True))
		)
	except (TypeError, ValueError) as exc:
		raise germline.errors.ConfigurationError(f"Invalid piece settings: {exc}") from exc

	voices = config.get('voices')

	if voices is None:
		piece.create_default_voices()

	for number, voice_config in enumerate(voices or [], start=1):
		try:
			piece.create_voice(
				octave_adjustment = int(voice_config.get('octave_adjustment', 0)),
				speed_scale_factor = voice_config.get('speed_scale_factor', 1),
				instrument_name = str(voice_config.get('instrument', germline.piece.DEFAULT_INSTRUMENT))
			)
		except (TypeError, ValueError) as exc:
			raise germline.errors.ConfigurationError(f"Voice {number}: {exc}") from exc

	sections = config.get('sections')

	if sections is None:
		piece.create_default_sections()

	for number, section_config in enumerate(sections or [], start=1):
		try:
			section = piece.create_section(
				self_similarity = _self_similarity(section_config.get('self_similarity')),
				apply_inversion = bool(section_config.get('inversion', False)),
				apply_retrograde = bool(section_config.get('retrograde', False)),
				scale = _scale(section_config, 'major') if 'scale' in section_config else None,
				duration = section_config.get('duration')
			)

			for index in section_config.get('resting_voices', []):
				piece.voice_section(piece.voices[index], section).rest = True

		except (TypeError, ValueError, IndexError) as exc:
			raise germline.errors.ConfigurationError(f"Section {number}: {exc}") from exc

	logger.info(f"Built piece with {len(piece.voices)} voices and {len(piece.sections)} sections")

	return piece
