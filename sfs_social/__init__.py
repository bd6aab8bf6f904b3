"""
sfs_social: connect social accounts and publish scheduled posts.
"""

__version__ = "1.0.0"
