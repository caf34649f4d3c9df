"""Ports for the tenancy bounded context.

Ports describe the narrow interfaces through which the session engine
consumes its external collaborators: the identity provider, the remote
document store, the local key-value store and the UI event loop.
"""
