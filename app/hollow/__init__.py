"""hollow - find empty folders in Google Drive with a resumable scan.

The scan walks every folder below a set of configured roots in
breadth-first order, spread over as many short, time-boxed invocations
as it takes, and reports folders that have no files and no subfolders.
"""

__version__ = "0.3.0"
