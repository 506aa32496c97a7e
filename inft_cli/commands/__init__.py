"""
INFT CLI Commands Package

Command modules for the INFT CLI.
"""

__all__ = ['agent', 'config']
