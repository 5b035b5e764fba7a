"""Application layer: DTOs, ports, session services and use cases.

Depends only on domain and protocol definitions. Infrastructure implements
the interfaces (repositories, identity provider).
"""
