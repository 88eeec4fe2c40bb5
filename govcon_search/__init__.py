"""
Contract Opportunity Search
Search, ranking and related-term suggestions for government contract opportunities
"""
__version__ = "1.0.0"
