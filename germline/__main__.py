import logging
import sys

import germline.config
import germline.errors
import germline.midi_export


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main () -> None:

	"""
	Generate the piece described by a YAML file, log a summary and optionally save it as MIDI.

	Usage: ``germline [config.yaml] [output.mid]``
	"""

	config_path = sys.argv[1] if len(sys.argv) > 1 else 'config.yaml'
	output_path = sys.argv[2] if len(sys.argv) > 2 else None
	config = germline.config.load_config(config_path)

	try:
		piece = germline.config.build_piece(config)
		result = piece.generate()
	except germline.errors.GermlineError as e:
		logger.error(f"Cannot generate piece: {e}")
		sys.exit(1)

	for voice in result.voices:
		logger.info(f"Channel {voice.channel} ({voice.instrument_name}): {len(voice.notes)} notes, {voice.end_tick} ticks")

	logger.info(
		f"{result.measures} measures of {result.time_signature}, "
		f"{result.ticks_per_quarter} ticks per quarter, time scale {result.time_scale}, "
		f"{len(result.key_signature_changes)} key signature changes"
	)

	if output_path:
		logger.info(f"Saving MIDI file to {output_path}...")
		germline.midi_export.build_midi_file(result).save(output_path)
		logger.info(f"Saved {output_path}")


if __name__ == "__main__":
	main()
