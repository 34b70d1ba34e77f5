from app.infrastructure.clients.registry_client import RegistryClient

__all__ = ["RegistryClient"]
