"""Claim verification service for AI-generated text."""

__version__ = "0.1.0"
