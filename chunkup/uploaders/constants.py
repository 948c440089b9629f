"""Shared constants for chunk planning and dispatch."""

# =============================================================================
# Chunk Geometry
# =============================================================================

MB = 1024 * 1024

# A file is measured in groups of this many megabytes when picking a tier.
GROUP_SIZE_MB = 10000

# (groups below threshold, chunk size in MB), checked in ascending order
CHUNK_SIZE_TIERS_MB = (
    (5, 5),
    (50, 50),
    (100, 100),
)

# Chunk size in MB once every tier threshold is reached
MAX_CHUNK_SIZE_MB = 210

# =============================================================================
# Content Identifiers
# =============================================================================

IDENTIFIER_SEPARATOR = "-"

# Probe results are keyed "<algorithm>-<hex digest>"
DIGEST_ALGORITHM = "sha256"

# =============================================================================
# Dispatch Defaults
# =============================================================================

# Chunks in flight at once (bounds both buffers in memory and remote load)
DEFAULT_MAX_IN_FLIGHT = 8

# Multipart form field carrying chunk bytes
CHUNK_FORM_FIELD = "chunk"
