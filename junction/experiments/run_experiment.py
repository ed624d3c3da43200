import json
import logging
import time
from typing import Optional
from junction.domain.config import load_config
from junction.kernel.simulation_kernel import SimulationKernel

logger = logging.getLogger(__name__)

def run_headless_experiment(output_path: str, config_path: Optional[str] = None, duration_ticks: int = 2400):
    config = load_config(config_path)
    kernel = SimulationKernel(config)
    kernel.initialize(seed=config.seed)

    results = []

    start_time = time.time()
    for _ in range(duration_ticks):
        summary = kernel.run_tick()
        results.append(summary.model_dump(mode="json"))

    end_time = time.time()
    stats = kernel.get_statistics()
    logger.info("Experiment finished in %.4fs: %d spawned, %d passed, %.2f vehicles/min",
                end_time - start_time, stats.vehicles_spawned, stats.vehicles_passed, stats.vehicles_per_minute)

    with open(output_path, 'w') as f:
        json.dump({"stats": stats.model_dump(mode="json"), "ticks": results}, f, indent=2)
    return stats

if __name__ == "__main__":
    import sys
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    if len(sys.argv) > 1:
        config_path = sys.argv[2] if len(sys.argv) > 2 else None
        ticks = int(sys.argv[3]) if len(sys.argv) > 3 else 2400
        run_headless_experiment(sys.argv[1], config_path, ticks)
    else:
        print("Usage: python -m junction.experiments.run_experiment <output> [config] [ticks]")
