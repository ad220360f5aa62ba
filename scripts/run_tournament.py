"""
Run Tournament Script.

Usage:
    python scripts/run_tournament.py experiment=four_way
"""

import logging
import os

import hydra
from omegaconf import DictConfig

from engine.tournament import Tournament, summarize


@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    log_level = getattr(logging, cfg.experiment.log_level.upper())
    root = logging.getLogger()
    root.setLevel(log_level)
    for name in ("engine", "sellers"):
        logging.getLogger(name).setLevel(log_level)

    # Running without hydra.job_logging leaves the root logger bare
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(asctime)s][%(name)s][%(levelname)s] - %(message)s'))
        root.addHandler(handler)

    logging.info(f"Running experiment: {cfg.experiment.name}")

    tournament = Tournament(cfg)
    results = tournament.run()

    # Save results
    output_dir = cfg.experiment.output_dir
    os.makedirs(output_dir, exist_ok=True)
    results.to_csv(os.path.join(output_dir, "results.csv"), index=False)

    logging.info(f"Results saved to {output_dir}")
    logging.info("Mean return by seller type:")
    print(summarize(results))


if __name__ == "__main__":
    main()
