import pytest

from consolidation.config_loader import ConfigLoader


def test_missing_file_falls_back_to_defaults(tmp_path):
    config = ConfigLoader(str(tmp_path / 'absent.yaml'))

    assert config.config == ConfigLoader.DEFAULTS
    assert config.config is not ConfigLoader.DEFAULTS
    assert config.get_host_count() == 20
    assert config.get_vm_count() == 60
    assert config.get_topology() == 'TREE'
    assert config.get_supernode_percentile() == pytest.approx(0.85)
    assert config.get_max_release_attempts() == 3


def test_file_values_are_merged_over_defaults(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(
        "experiment:\n"
        "  host_count: 8\n"
        "  topology: vl2\n"
        "workload:\n"
        "  hosts_per_rack: 2\n"
        "logging:\n"
        "  level: debug\n"
    )
    config = ConfigLoader(str(path))

    assert config.get_host_count() == 8
    assert config.get_vm_count() == 60
    assert config.get_topology() == 'vl2'
    assert config.get_rack_layout() == (2, 2)
    assert config.get_host_capacity() == (64000, 40000)
    assert config.get_log_level() == 'DEBUG'


def test_invalid_yaml_uses_defaults(tmp_path):
    path = tmp_path / 'broken.yaml'
    path.write_text("experiment: [unclosed\n")
    config = ConfigLoader(str(path))
    assert config.config == ConfigLoader.DEFAULTS


def test_non_mapping_top_level_uses_defaults(tmp_path):
    path = tmp_path / 'list.yaml'
    path.write_text("- 1\n- 2\n")
    config = ConfigLoader(str(path))
    assert config.config == ConfigLoader.DEFAULTS


def test_missing_key_returns_default(tmp_path):
    config = ConfigLoader(str(tmp_path / 'absent.yaml'))
    del config.config['experiment']['vm_count']

    assert config.get('experiment', 'vm_count', default=5) == 5
    assert config.get('nowhere', 'at_all') is None
    assert config.get_vm_count() == 60


def test_defaults_are_not_shared_between_loaders(tmp_path):
    first = ConfigLoader(str(tmp_path / 'absent.yaml'))
    first.config['experiment']['host_count'] = 99
    second = ConfigLoader(str(tmp_path / 'absent.yaml'))
    assert second.get_host_count() == 20
