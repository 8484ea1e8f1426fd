"""
Config DB - structured configuration store client

Presents tables of entries on top of a flat key/hash store, with pipelined
bulk reads and writes and a startup readiness wait.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
