from gdynia.bundler import BundleConfig, BundleError, Esbuild
from gdynia.core import Forge
from gdynia.discovery import DuplicateEntryError, WidgetEntry
from gdynia.entry import MalformedEntryError
from gdynia.output import MissingOutputError

__all__ = [
    "BundleConfig",
    "BundleError",
    "DuplicateEntryError",
    "Esbuild",
    "Forge",
    "MalformedEntryError",
    "MissingOutputError",
    "WidgetEntry",
]
