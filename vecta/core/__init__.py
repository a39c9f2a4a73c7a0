"""
Core domain layer: error kinds and the image conversion engine.
"""
