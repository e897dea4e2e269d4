"""
Extract — Section extraction and label normalization.
"""
