"""WebPrint - render web content to print-quality PDF."""

__version__ = "0.1.0"
