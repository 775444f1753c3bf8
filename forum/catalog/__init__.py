"""
Query catalog: the schema script plus every named statement the store runs.
"""
