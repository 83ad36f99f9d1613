"""
Wiki backup to an external gist endpoint.
"""
