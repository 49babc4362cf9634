"""
Dead link monitor: finds hyperlinks in HTML and Markdown documents and
reports the ones that do not answer 200.
"""

__version__ = "0.1.0"
