"""
Services

Price source, persistence, notifications and alert evaluation.
"""
