"""
Shared constants for the metric index finder.

Single source of truth for the index layout that both the loader
(data/loader.py) and the query builder (finder/builder.py) rely on.
"""

# Level offsets: which physical partition of the index a row belongs to.
# Row level = number of path segments + offset.
#   forward daily  → +0
#   reversed daily → +10000
#   forward tree   → +20000
#   reversed tree  → +30000
REVERSE_LEVEL_OFFSET = 10000
TREE_LEVEL_OFFSET = 20000
REVERSE_TREE_LEVEL_OFFSET = 30000

# Placeholder date of the undated "tree" snapshot partition
DEFAULT_TREE_DATE = "1970-02-12"

# Hierarchy separator; a trailing separator marks a directory node
PATH_SEPARATOR = "."

# Glob characters that make a segment a wildcard
WILDCARD_CHARS = "[]{}*?"

# ClickHouse output format requested for index queries (no header, no escaping)
OUTPUT_FORMAT = "TabSeparatedRaw"

# Partition names used by `info` output
PARTITIONS = {
    0: "daily",
    REVERSE_LEVEL_OFFSET: "daily_reversed",
    TREE_LEVEL_OFFSET: "tree",
    REVERSE_TREE_LEVEL_OFFSET: "tree_reversed",
}
