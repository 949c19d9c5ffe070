"""
Use Cases

Organized into domain folders:
- auth/: Account lookup, one-time codes, sessions and the login flow
"""
