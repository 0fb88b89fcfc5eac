"""
Service functions connecting the authentication provider with the database.
"""
