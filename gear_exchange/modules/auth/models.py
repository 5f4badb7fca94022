# Custom credential auth
# Credentials live in the users table (see modules/users/models.py); Supabase
# Auth is not used. This module handles:
# - User registration (bcrypt hash stored in users.password_hash)
# - Username/password login
# - JWT issuing (HS256, claims: userId, username, role, iat, exp)

"""
Tokens are stateless: logout is acknowledged server-side and completed by the
client discarding the token. The role claim is informational only; every
authenticated request reloads the user row and uses its current role.
"""
