"""
Engine — Conformance evaluation of documents against rulesets.
"""
