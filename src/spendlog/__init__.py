"""
spendlog: monobank webhook receiver that logs categorized spending to Google Sheets.
"""

__version__ = "0.1.0"
