"""
serves3 gateway: browse an S3 compatible bucket as a file tree over HTTP.
"""

__version__ = "1.0.0"
