"""
Generators — produce source files for the project being scaffolded.

Each generator module exposes a ``render_*()`` function that returns
the file content as a string.
"""
