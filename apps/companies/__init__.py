"""
Companies app: tenants, memberships, reporting lines and the platform console.
"""
