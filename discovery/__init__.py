"""
discovery - Pair lookup (factory registry).
"""
