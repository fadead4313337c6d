# tuatara_sim/utils/config.py
"""
Central configuration file for the Tuatara machine simulator.

Contains static application settings and the defaults used by the
interpreter core. User-adjustable values live in the SettingsManager;
the values here are the constants it falls back to.
"""

# ==============================================================================
# STATIC APPLICATION CONFIGURATION
# ==============================================================================
# These values are constant and define the application's identity.

APP_VERSION = "1.0.0"
APP_NAME = "Tuatara Machine Simulator"
ORGANIZATION_NAME = "Tuatara-Devs"

MACHINE_FILE_EXTENSION = ".tmachine"
TAPE_FILE_EXTENSION = ".tape"

# Identifiers written into saved files so a loader can reject foreign JSON.
MACHINE_FILE_FORMAT = "tuatara-machine"
TAPE_FILE_FORMAT = "tuatara-tape"
FILE_FORMAT_VERSION = 1


# ==============================================================================
# INTERPRETER DEFAULTS
# ==============================================================================

# Number of cells allocated for a fresh tape; storage doubles from there.
DEFAULT_TAPE_CAPACITY = 100

# Step budget used by run-until-halt when the caller does not supply one.
# Zero means unbounded.
DEFAULT_MAX_STEPS = 10000

# Symbols of the alphabet a new machine starts with (blank is always added).
DEFAULT_ALPHABET_SYMBOLS = "01"

# Rendered in configuration strings in place of an empty tape segment.
EMPTY_STRING_MARKER = "λ"
