"""content/ -- Categories, articles, comments and saved articles for Inkwell.

Layer rule: content/ imports only core/ + stdlib + third-party libraries.
It does NOT import from api/ or auth/. User identities arrive as plain ids.
"""
