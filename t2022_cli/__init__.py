"""
t2022 CLI - command-line client for the Token-2022 program
"""

__version__ = "0.1.0"
