import copy
import logging
import os

import yaml

logger = logging.getLogger('tacs')


class ConfigLoader:
    """
    Loads and manages simulator configuration from a YAML file.
    Provides default values if the config file is missing or incomplete.
    """

    DEFAULTS = {
        'experiment': {
            'host_count': 20,
            'vm_count': 60,
            'topology': 'TREE',
            'supernode_percentile': 0.85,
            'max_release_attempts': 3,
            'traffic_groups': 0
        },
        'workload': {
            'host_ram': 64000,
            'host_mips': 40000,
            'hosts_per_rack': 4,
            'racks_per_pod': 2,
            'vm_ram_min': 1000,
            'vm_ram_max': 8000,
            'vm_mips_min': 1000,
            'vm_mips_max': 6000,
            'vm_seed': 1,
            'traffic_seed': 2
        },
        'logging': {
            'level': 'INFO',
            'file': ''
        }
    }

    def __init__(self, config_file='config/tacs_config.yaml'):
        """
        Args:
            config_file: Path to YAML config file (relative or absolute)
        """
        self.config_file = config_file
        self.config = self._load_config()

    def _load_config(self):
        if not self.config_file or not os.path.exists(self.config_file):
            logger.warning(f"[ConfigLoader] Config file not found at '{self.config_file}'. Using default values.")
            return copy.deepcopy(self.DEFAULTS)

        try:
            with open(self.config_file, 'r') as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"[ConfigLoader] Error parsing YAML config file: {e}. Using default values.")
            return copy.deepcopy(self.DEFAULTS)
        except OSError as e:
            logger.error(f"[ConfigLoader] Error reading config file: {e}. Using default values.")
            return copy.deepcopy(self.DEFAULTS)

        if not isinstance(file_config, dict):
            logger.error(f"[ConfigLoader] Top level of '{self.config_file}' is not a mapping. Using default values.")
            return copy.deepcopy(self.DEFAULTS)

        merged_config = self._deep_merge(copy.deepcopy(self.DEFAULTS), file_config)
        logger.info(f"[ConfigLoader] Configuration loaded from '{self.config_file}'.")
        return merged_config

    @staticmethod
    def _deep_merge(defaults, overrides):
        """Deep merge overrides into defaults (overrides take precedence)."""
        result = defaults.copy()

        for key, value in overrides.items():
            if isinstance(value, dict) and key in result and isinstance(result[key], dict):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, *keys, default=None):
        """
        Get a nested config value.
        Example: config.get('experiment', 'host_count')
        """
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                logger.warning(f"[ConfigLoader] Config key not found: {'.'.join(keys)}. Using default: {default}")
                return default

        return value

    def _get_with_default(self, section, key):
        return self.get(section, key, default=self.DEFAULTS[section][key])

    def get_host_count(self):
        return int(self._get_with_default('experiment', 'host_count'))

    def get_vm_count(self):
        return int(self._get_with_default('experiment', 'vm_count'))

    def get_topology(self):
        return self._get_with_default('experiment', 'topology')

    def get_supernode_percentile(self):
        return float(self._get_with_default('experiment', 'supernode_percentile'))

    def get_max_release_attempts(self):
        return int(self._get_with_default('experiment', 'max_release_attempts'))

    def get_traffic_groups(self):
        """0 selects the uniform traffic matrix, anything above it the clustered one."""
        return int(self._get_with_default('experiment', 'traffic_groups'))

    def get_host_capacity(self):
        """(ram, mips) of every generated host."""
        return (self._get_with_default('workload', 'host_ram'),
                self._get_with_default('workload', 'host_mips'))

    def get_rack_layout(self):
        """(hosts_per_rack, racks_per_pod)."""
        return (int(self._get_with_default('workload', 'hosts_per_rack')),
                int(self._get_with_default('workload', 'racks_per_pod')))

    def get_vm_ram_range(self):
        return (self._get_with_default('workload', 'vm_ram_min'),
                self._get_with_default('workload', 'vm_ram_max'))

    def get_vm_mips_range(self):
        return (self._get_with_default('workload', 'vm_mips_min'),
                self._get_with_default('workload', 'vm_mips_max'))

    def get_vm_seed(self):
        return self._get_with_default('workload', 'vm_seed')

    def get_traffic_seed(self):
        return self._get_with_default('workload', 'traffic_seed')

    def get_log_level(self):
        return str(self._get_with_default('logging', 'level')).upper()

    def get_log_file(self):
        return self._get_with_default('logging', 'file')

    def log_config(self):
        """Log loaded configuration for debugging."""
        logger.info("[ConfigLoader] Current Configuration:")
        logger.info(f"  Hosts / VMs: {self.get_host_count()} / {self.get_vm_count()}")
        logger.info(f"  Topology: {self.get_topology()}")
        logger.info(f"  Supernode Percentile: {self.get_supernode_percentile()}")
        logger.info(f"  Max Release Attempts: {self.get_max_release_attempts()}")
        logger.info(f"  Traffic Groups: {self.get_traffic_groups() or 'uniform'}")
        logger.info(f"  Host Capacity (ram, mips): {self.get_host_capacity()}")
        logger.info(f"  Rack Layout (hosts/rack, racks/pod): {self.get_rack_layout()}")
        logger.info(f"  VM RAM Range: {self.get_vm_ram_range()}, VM MIPS Range: {self.get_vm_mips_range()}")
        logger.info(f"  Seeds (vm, traffic): {self.get_vm_seed()}, {self.get_traffic_seed()}")
        logger.info(f"  Log Level: {self.get_log_level()}, Log File: {self.get_log_file() or '(stdout only)'}")
