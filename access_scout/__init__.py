"""
AccessScout package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point; the submodule name access_scout.cli stays bound to the module
from access_scout.cli import cli as main_cli  # noqa: E402

__all__ = ["main_cli", "__version__"]
