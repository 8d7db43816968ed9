"""Unified command-line interface for tallyscan.

Usage:
    tallyscan parse <ocr-file>
    tallyscan parse <ocr-file> --rules-only --json
    tallyscan parse <ocr-file> --config settings.toml
    tallyscan stitch <ocr-file>
"""
