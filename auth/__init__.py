"""auth/ -- Credential service for authgate: hashing, tokens, user store, register/login.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or client/.
api/ imports from auth/, not the other way around.
"""
