"""Detection and aggregation constants: single source of truth.

Every tunable the recording engine relies on lives here so the server config
layer and the tests agree on the defaults.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Cycle detection
# ---------------------------------------------------------------------------
CYCLE_THRESHOLD: Final[float] = 0.85
"""Angular-rate magnitude a single axis must exceed (strictly) to count."""

CYCLE_DEBOUNCE_MS: Final[int] = 200
"""Minimum gap (strictly greater) between two counted cycles, in ms."""

# ---------------------------------------------------------------------------
# Frequency windows
# ---------------------------------------------------------------------------
FREQUENCY_WINDOW_MS: Final[int] = 1000
"""Nominal length of one frequency bucket; the external tick drives flushes."""

MS_PER_SECOND: Final[float] = 1000.0

# ---------------------------------------------------------------------------
# Heart rate
# ---------------------------------------------------------------------------
NO_HEART_RATE_BPM: Final[float] = 0.0
"""Sensor value meaning "no reading"; shown on screen, never aggregated."""
