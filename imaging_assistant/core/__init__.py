"""
Core orchestration: Gemini access and static imaging reference data.
"""
