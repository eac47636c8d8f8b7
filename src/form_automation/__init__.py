"""
Form Automation Service

Fills a configured third-party web form from profile records parsed out of PDF
uploads or supplied by the web client, with a per-record audit trail.
"""

__version__ = "1.0.0"
