"""auth/ -- Authentication, sessions and account management for Inkwell.

Layer rule: auth/ imports only core/ + stdlib + third-party libraries.
It does NOT import from api/ or content/.
api/ imports from auth/, not the other way around.
"""
