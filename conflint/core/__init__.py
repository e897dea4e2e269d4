"""
Core — Cross-cutting infrastructure (logging).
"""
