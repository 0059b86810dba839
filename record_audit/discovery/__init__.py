"""Menu and record discovery built on the convergence scanner."""
from .scanner import ConvergenceScanner, ScanResult
from .menus import MenuDiscovery
from .records import Record, RecordDiscovery, is_valid_description, location_name
from .navigation import NavigationChangeDetector

__all__ = [
    "ConvergenceScanner",
    "ScanResult",
    "MenuDiscovery",
    "Record",
    "RecordDiscovery",
    "is_valid_description",
    "location_name",
    "NavigationChangeDetector",
]
