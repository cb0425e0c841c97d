"""Central versioning and schema constants for the expander."""

__all__ = ["__version__", "CONFIG_SCHEMA_VERSION"]

#: Semantic version of this codebase (bump using SemVer).
__version__ = "0.1.0"

#: Settings schema version (increment on breaking changes to the config format).
CONFIG_SCHEMA_VERSION = 1
