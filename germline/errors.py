"""Exception hierarchy for germline.

Failures fall into four families so callers can tell "fix your input"
apart from "this composition is too complex to represent exactly":

- ``PreconditionError`` - structural violations (empty germ, iteration
  count below one, notes with mixed scales where one scale is required).
- ``NumericError`` - fraction overflow and unrepresentable tick resolutions.
  Division by zero surfaces as the built-in ``ZeroDivisionError``.
- ``ConfigurationError`` - invalid key or time signatures and other settings,
  raised eagerly at construction time.
- ``NoteStringParseError`` - germ text that cannot be parsed at all.
"""


class GermlineError(Exception):
	pass


class PreconditionError(GermlineError, ValueError):
	pass


class GermIsEmptyError(PreconditionError):
	pass


class InconsistentScaleError(PreconditionError):
	pass


class InvalidNoteError(PreconditionError):
	pass


class NumericError(GermlineError, ArithmeticError):
	pass


class FractionOverflowError(NumericError, OverflowError):
	pass


class ResolutionError(NumericError):
	pass


class ConfigurationError(GermlineError, ValueError):
	pass


class InvalidKeySignatureError(ConfigurationError):
	pass


class InvalidTimeSignatureError(ConfigurationError):
	pass


class NoteStringParseError(GermlineError, ValueError):
	pass
