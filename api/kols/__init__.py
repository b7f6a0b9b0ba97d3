"""
KOL (influencer) records: field rules, partial-update directives, storage and routes.
"""
