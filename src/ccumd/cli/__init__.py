"""
Command-line interface for ccumd.
"""
