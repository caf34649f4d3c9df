"""Tenancy bounded context.

Resolves which tenant (company) a signed-in identity operates in, under
which role, and keeps the resulting session consistent, isolated and
time-limited.
"""
