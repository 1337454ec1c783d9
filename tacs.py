#!/usr/bin/env python3

import argparse
import logging
import sys

from consolidation.config_loader import ConfigLoader
from consolidation.errors import ConsolidationError
from consolidation.experiments import EXPERIMENTS, run_experiments
from consolidation.topology import Topology

logger = logging.getLogger('tacs')


def parse_args(argv=None):
    """
    Parse the command-line arguments.
    """
    parser = argparse.ArgumentParser(description="TACS - Traffic-Aware Consolidation Simulator")
    parser.add_argument("--config", default='config/tacs_config.yaml', help="Path to the YAML configuration file")
    parser.add_argument("--experiment", default='all', choices=['all'] + list(EXPERIMENTS),
                        help="Experiment to run (default: all)")
    parser.add_argument("--hosts", type=int, default=None, help="Number of hosts (overrides config)")
    parser.add_argument("--vms", type=int, default=None, help="Number of VMs (overrides config)")
    parser.add_argument("--topology", type=str, default=None, choices=[t.name for t in Topology],
                        help="Network topology for the distance model (overrides config)")
    parser.add_argument("--percentile", type=float, default=None,
                        help="Supernode percentile in [0, 1] for traffic clustering (overrides config)")
    parser.add_argument("--max-release", type=int, default=None,
                        help="Maximum host release attempts for the traffic-aware algorithm (overrides config)")
    parser.add_argument("--traffic-groups", type=int, default=None,
                        help="Use a clustered traffic matrix with this many groups; 0 for uniform (overrides config)")
    parser.add_argument("--log-level", type=str, default=None, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help="Logging level (overrides config)")
    return parser.parse_args(argv)


def apply_overrides(config, args):
    """Write command-line values over the loaded configuration."""
    overrides = {
        'host_count': args.hosts,
        'vm_count': args.vms,
        'topology': args.topology,
        'supernode_percentile': args.percentile,
        'max_release_attempts': args.max_release,
        'traffic_groups': args.traffic_groups,
    }
    for key, value in overrides.items():
        if value is not None:
            config.config['experiment'][key] = value
    if args.log_level:
        config.config['logging']['level'] = args.log_level


def setup_logging(level='INFO', log_file=''):
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers,
        force=True
    )
    logging.getLogger('tacs').setLevel(level)


def main(argv=None):
    args = parse_args(argv)

    setup_logging()
    config = ConfigLoader(args.config)
    apply_overrides(config, args)
    setup_logging(config.get_log_level(), config.get_log_file())
    config.log_config()

    names = list(EXPERIMENTS) if args.experiment == 'all' else [args.experiment]
    logger.info(f"[Main] Running experiments: {', '.join(names)}")
    try:
        run_experiments(config, names)
    except ConsolidationError as e:
        logger.error(f"[Main] An error occurred: {e}")
        return 1
    logger.info("[Main] All experiments finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
