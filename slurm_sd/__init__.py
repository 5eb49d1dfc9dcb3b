"""Prometheus Slurm SD — HTTP service discovery for Slurm clusters.

Polls slurmrestd for the node inventory and serves it as a Prometheus
HTTP SD document.

Quickstart::

    from slurm_sd.config import Config
    from slurm_sd.discovery import DiscoveryService
    from slurm_sd.slurm import SlurmClient

    cfg = Config.load("config.yaml")
    client = SlurmClient(cfg.slurm_api_endpoint, cfg.slurm_api_version)
    service = DiscoveryService(client, cfg.jobs, cfg.interval_seconds)
    await service.refresh()
    print(service.get_all_targets())
"""

__version__ = "1.0.0"
