"""Storage browsers.

A browser lists the direct children of a folder in some storage
service. The traversal engine only depends on the StorageBrowser
interface; concrete backends live in their own modules.
"""

from hollow.browsers.base import (
    BrowserError,
    FolderAccessError,
    FolderNotFoundError,
    StorageBrowser,
)
from hollow.browsers.local import LocalFolderBrowser

__all__ = [
    "BrowserError",
    "FolderAccessError",
    "FolderNotFoundError",
    "LocalFolderBrowser",
    "StorageBrowser",
]
