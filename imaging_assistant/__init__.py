"""
Medical Imaging Assistant

Request-orchestration service that sends medical images and imaging
questions to Google Gemini and returns educational interpretations.
"""

__version__ = "1.0.0"
