"""
Rules — Template rulesets, content checks, and the ruleset registry.
"""
