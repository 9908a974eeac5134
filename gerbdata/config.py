"""
Central configuration for gerbdata defaults and shared constants.
"""

import logging
import os

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")
# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]

TRACE_ENABLED = str(os.getenv("GERBDATA_TRACE", "0")).lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    s = raw.strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    logger.warning("Ignoring unrecognized boolean value %s=%r", name, raw)
    return default


# Format specification bounds and defaults (digits per coordinate field)
MAX_FORMAT_DIGITS: int = 7
DEFAULT_INTEGER_DIGITS: int = 5
DEFAULT_DECIMAL_DIGITS: int = 5

# Units used until a MO parameter says otherwise
DEFAULT_UNITS: str = "IN"

# Parser/document leniency (overridable by env, then by constructor keywords)
IGNORE_INVALID_DEFAULT: bool = _env_bool("GERBDATA_IGNORE_INVALID", False)
IGNORE_BLANK_DEFAULT: bool = _env_bool("GERBDATA_IGNORE_BLANK", False)

# Coordinates without an operation code are only allowed for G02/G03 when True.
# Some legacy writers emit them for any function; set False to accept those.
REQUIRE_OPCODE_DEFAULT: bool = _env_bool("GERBDATA_REQUIRE_OPCODE", True)

LOG_LEVEL_DEFAULT: str = os.getenv("GERBDATA_LOG_LEVEL", "WARNING").upper()

# Encoding used when reading files; Gerber is 7-bit ASCII but latin-1 never fails
FILE_ENCODING: str = os.getenv("GERBDATA_FILE_ENCODING", "latin-1")
