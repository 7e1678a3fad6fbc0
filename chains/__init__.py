"""
chains - RPC access per chain.
"""
