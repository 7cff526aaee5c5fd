"""Resource limit and range constants for value bridging."""

DEFAULT_MAX_DEPTH = 100
"""Maximum container nesting depth (CWE-674 prevention)."""

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT64_MAX = 2**64 - 1
