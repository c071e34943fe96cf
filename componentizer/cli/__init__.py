"""
Componentizer CLI
"""
