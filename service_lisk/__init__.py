"""
Lisk access service package.
"""
