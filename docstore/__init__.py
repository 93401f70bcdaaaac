"""
docstore — document management backend.
"""
__version__ = "2.0.0"
