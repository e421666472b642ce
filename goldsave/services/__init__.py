"""
Services.

Business logic of the commission and bonus engine.
"""
