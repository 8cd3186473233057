from .networks import NETWORKS, NetworkConfig, get_network
from .settings import Settings, load_settings

__all__ = ["NETWORKS", "NetworkConfig", "Settings", "get_network", "load_settings"]
