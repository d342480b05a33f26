"""
Core Module

Configuration, exceptions, collaborator protocols and logging shared by the
cache infrastructure and the application layer.
"""
