"""Request-independent helpers used by the routers.

This package contains the concurrent fetch helper and the form
validation collector.
"""
