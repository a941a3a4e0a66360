"""
Version information for the claim worker package.
"""

__version__ = "1.0.0"

VERSION_INFO = {
    "major": 1,
    "minor": 0,
    "patch": 0,
    "release": "stable",
}

def get_version_string() -> str:
    """Get a formatted version string."""
    return f"{__version__} ({VERSION_INFO['release']})"


def get_version_info() -> dict:
    """Get detailed version information."""
    return {
        "version": __version__,
        "details": VERSION_INFO,
    }
