"""
Render — Report formatting.
"""
