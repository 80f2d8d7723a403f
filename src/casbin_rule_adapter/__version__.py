"""Version information for the casbin rule adapter."""

__version__ = "0.3.0"
__version_info__ = tuple(int(i) for i in __version__.split("."))

# Capabilities the adapter exposes to the policy engine
FEATURES = {
    "filtered_load": True,        # Available since 0.1.0
    "batch_operations": True,     # Available since 0.2.0
    "update_operations": True,    # Available since 0.2.0
    "filtered_update": True,      # Available since 0.3.0
}


def get_version() -> str:
    """Get the current version string."""
    return __version__


def get_version_info() -> tuple:
    """Get the version as a tuple of integers."""
    return __version_info__


def get_features() -> dict:
    """Get available features for this version."""
    return FEATURES.copy()
