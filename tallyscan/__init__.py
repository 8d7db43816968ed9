"""Receipt understanding: turn noisy OCR output into structured receipt records."""

__version__ = "0.1.0"
