"""
INFT Command Line Interface

Commands for creating, retrieving, and updating encrypted Intelligent NFT
agent metadata and for managing CLI configuration.
"""

__version__ = "1.0.0"
