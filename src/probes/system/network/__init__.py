from .probe import NetworkIdentityProbe, count_known_networks

__all__ = ["NetworkIdentityProbe", "count_known_networks"]
