"""
Internship Watcher - Polling monitor for a published internship list.

This package provides functionality to:
- Fetch the internship feed document from its published URL
- Parse the markdown postings table into typed records
- Compare each snapshot with the previous one to detect new postings
- Alert about new postings and hand the snapshot to a presenter
- Repeat the cycle on a fixed polling interval
"""

__version__ = "1.0.0"
__author__ = "Internship Watcher Team"
