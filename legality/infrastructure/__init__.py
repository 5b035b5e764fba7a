"""Infrastructure layer: adapters for the remote store and identity provider."""
