"""Project-wide constants."""

from importlib.metadata import PackageNotFoundError, version


def get_installed_version() -> str:
    """Version of the installed distribution, or 0.0.0 when running from a checkout."""
    try:
        return version('minivault')
    except PackageNotFoundError:
        return '0.0.0'


PROJECT_NAME = 'Minivault'
PROJECT_VERSION = get_installed_version()
