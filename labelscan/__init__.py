"""Label Scan.

Turns OCR text from warehouse receiving labels into structured
inventory fields: item number, canonical barcode and unit count.
"""

__version__ = "1.0.0"
