"""Constants for germline.

This package contains three sets of constants:

- ``germline.constants.dynamics`` - Named dynamic levels and their MIDI volumes
- ``germline.constants.durations`` - Exact note values as ``Fraction`` whole-note durations
- ``germline.constants.midi`` - Channel, tempo and tick-resolution limits
"""
