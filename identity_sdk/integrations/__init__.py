"""
Web framework integrations.
"""
