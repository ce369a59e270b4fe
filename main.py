"""
EvoForage – Main Entry Point
============================

Usage examples:
  python main.py                          # defaults from config.py
  python main.py --gens 50 --seed 42      # reproducible 50-generation run
  python main.py --animals 80 --foods 120 # bigger world
  python main.py --steps 1000             # shorter generations
  python main.py --mutation-chance 0      # turn off mutations (demonstration)
"""

import argparse
import logging
import os
import time

import numpy as np

from simulation import Simulation
from visualizer import (ensure_dirs, save_world_snapshot,
                        save_evolution_chart, append_csv)
from config import (SAVE_DIR, SNAPSHOT_INTERVAL, LOG_FORMAT,
                    NUM_ANIMALS, NUM_FOODS, MAX_GENERATIONS, GENERATION_LENGTH,
                    MUTATION_CHANCE, MUTATION_COEFFICIENT)


# ──────────────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="EvoForage – evolving foraging animals")
    p.add_argument("--gens",       type=int,   default=MAX_GENERATIONS,
                   help="Number of generations to run")
    p.add_argument("--animals",    type=int,   default=NUM_ANIMALS,
                   help="Population size")
    p.add_argument("--foods",      type=int,   default=NUM_FOODS,
                   help="Food items on the map")
    p.add_argument("--steps",      type=int,   default=GENERATION_LENGTH,
                   help="Simulator steps per generation")
    p.add_argument("--mutation-chance", type=float, default=MUTATION_CHANCE,
                   help="Probability that a gene is perturbed")
    p.add_argument("--mutation-coeff",  type=float, default=MUTATION_COEFFICIENT,
                   help="Largest perturbation of a single gene")
    p.add_argument("--seed",       type=int,   default=None,
                   help="Random seed for reproducibility")
    p.add_argument("--outdir",     default=SAVE_DIR,
                   help="Output directory")
    p.add_argument("--snapshot_interval", type=int, default=SNAPSHOT_INTERVAL,
                   help="Save world snapshot every N generations")
    p.add_argument("--verbose", "-v", action="store_true",
                   help="Log every generation")
    return p.parse_args(argv)


# ──────────────────────────────────────────────────────────────────────────────
# Callbacks
# ──────────────────────────────────────────────────────────────────────────────

class RunRecorder:
    """Writes CSV rows, snapshots and charts as generations finish."""

    def __init__(self, outdir: str, snapshot_interval: int):
        self.outdir            = outdir
        self.snapshot_interval = snapshot_interval
        self.rows              = []
        self._t0               = time.time()

    def on_generation(self, generation, stats, snapshot):
        row = {"generation": generation, **stats.as_dict(),
               "elapsed_s": round(time.time() - self._t0, 3)}
        self._t0 = time.time()
        self.rows.append(row)
        append_csv(row, self.outdir)

        print(f"Gen {generation:>5}  |  {stats}  |  {row['elapsed_s']:.2f}s")

        if generation % self.snapshot_interval == 0:
            path = save_world_snapshot(snapshot, generation, self.outdir)
            print(f"  → Snapshot: {path}")

        if generation % 100 == 0:
            save_evolution_chart(self.rows, self.outdir)


# ──────────────────────────────────────────────────────────────────────────────
# Main
# ──────────────────────────────────────────────────────────────────────────────

def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format=LOG_FORMAT)
    ensure_dirs(args.outdir)

    print("=" * 60)
    print("  EvoForage – Evolving Foraging Animals")
    print("=" * 60)
    print(f"  Animals    : {args.animals}")
    print(f"  Foods      : {args.foods}")
    print(f"  Generations: {args.gens}")
    print(f"  Steps/gen  : {args.steps}")
    print(f"  Mutation   : chance={args.mutation_chance} coeff={args.mutation_coeff}")
    print(f"  Seed       : {args.seed}")
    print(f"  Output dir : {args.outdir}")
    print("=" * 60)

    rng = np.random.default_rng(args.seed)
    sim = Simulation.random(
        rng,
        num_animals          = args.animals,
        num_foods            = args.foods,
        generation_length    = args.steps,
        mutation_chance      = args.mutation_chance,
        mutation_coefficient = args.mutation_coeff,
    )

    recorder = RunRecorder(args.outdir, args.snapshot_interval)
    sim.run(rng, args.gens, on_generation=recorder.on_generation)

    print("\nSaving final evolution chart …")
    chart_path = save_evolution_chart(recorder.rows, args.outdir, "evolution_final.png")
    print(f"  → {chart_path}")

    snap = save_world_snapshot(sim.world(), sim.generation, args.outdir, "final.png")
    print(f"  → Final snapshot: {snap}")

    print("\nDone! All outputs saved to:", os.path.abspath(args.outdir))
    return recorder.rows


if __name__ == "__main__":
    main()
