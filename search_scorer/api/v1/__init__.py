"""
Version 1 of the reporting API.
"""
