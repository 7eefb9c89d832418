"""
Logging, metrics and LLM retry helpers.
"""
