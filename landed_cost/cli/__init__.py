"""CLI 모듈"""
from .commands import create_parser, parse_dimensions, main

__all__ = ["create_parser", "parse_dimensions", "main"]
