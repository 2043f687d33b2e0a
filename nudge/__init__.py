"""
nudge - personality-aware reply orchestration and task extraction
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("nudge-core")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
__logo__ = "💕"
