"""
Shared, cross-cutting code for the KOL registry API.

`core/` holds the small building blocks every feature uses: settings,
logging, the asyncpg pool and the HTML sanitizer. Feature-specific SQL and
business rules live in the feature packages (`auth/`, `kols/`).
"""
