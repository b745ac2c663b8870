"""
killernodes-installer - provisions KILLER NODES on a fresh Ubuntu server
"""

__version__ = "1.0.0"

from .core import Installer, InstallerError

__all__ = ["Installer", "InstallerError"]
