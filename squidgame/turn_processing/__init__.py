"""Input processing helpers.

This package centralizes validation so inputs from every transport flow through the
same pipeline and show up consistently in server logs.
"""
