"""
Services combining the stores with the numeric core.
"""
