"""
persondir: person attribute lookups backed by a single parameterized SQL query.
"""
