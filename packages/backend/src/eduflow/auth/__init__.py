"""Authentication and authorization.

Learn: Users log in with email/password and receive a short-lived access
token plus a long-lived refresh token (HTTP-only cookie). The access
token's claims resolve to a Principal, and the tenant guard turns that
Principal into a TenantContext used for institute-level scoping.
"""
