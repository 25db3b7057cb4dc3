"""
Configuration module.

Typed defaults, YAML-backed loading with override precedence, and validation.
"""
