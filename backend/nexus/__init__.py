"""
Business Nexus backend package.
"""
