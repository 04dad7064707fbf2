"""
Infrastructure adapters: the HTTP search client and dataset readers.
"""
