# gfsync Platform Detection Utilities
# Maps the running OS onto the identifiers used by the autostart registry

import platform

# Platform name mapping: system name -> gfsync platform name
_PLATFORM_MAP: dict[str, str] = {
    "Darwin": "macos",
    "Linux": "linux",
    "Windows": "windows",
}


def get_current_platform() -> str:
    """
    Get the current platform identifier.

    Returns:
        Platform string: "macos", "linux", "windows", or the lowercased
        system name for anything else.
    """
    system = platform.system()
    return _PLATFORM_MAP.get(system, system.lower())
