from .loader import ConfigError, config_from_dict, default_config, load_config

__all__ = ["ConfigError", "config_from_dict", "default_config", "load_config"]
