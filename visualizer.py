"""
Visualizer for EvoForage.

Produces:
  1. World snapshots  – animals as heading triangles, food as dots
  2. Evolution chart  – min / avg / max fitness over generations
  3. CSV log          – per-generation stats
"""

import os
import csv
import math

import matplotlib
matplotlib.use("Agg")          # non-interactive backend (no display needed)
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from config import SAVE_DIR, LOG_CSV


# ──────────────────────────────────────────────────────────────────────────────
# Directory setup
# ──────────────────────────────────────────────────────────────────────────────

def ensure_dirs(base: str = SAVE_DIR):
    for sub in ("snapshots", "charts"):
        os.makedirs(os.path.join(base, sub), exist_ok=True)


# ──────────────────────────────────────────────────────────────────────────────
# World snapshot
# ──────────────────────────────────────────────────────────────────────────────

def _triangle(x: float, y: float, size: float, rotation: float) -> list:
    """Three corners of a triangle pointing along `rotation`."""
    tip = (x + math.cos(rotation) * size * 1.5,
           y + math.sin(rotation) * size * 1.5)
    left = (x + math.cos(rotation + 2.0 / 3.0 * math.pi) * size,
            y + math.sin(rotation + 2.0 / 3.0 * math.pi) * size)
    right = (x + math.cos(rotation + 4.0 / 3.0 * math.pi) * size,
             y + math.sin(rotation + 4.0 / 3.0 * math.pi) * size)
    return [tip, left, right]


def save_world_snapshot(snapshot, generation: int, base: str = SAVE_DIR,
                        filename: str = None):
    """
    Render a WorldSnapshot.
    Animals are coloured by how much they ate (darker = hungrier).
    """
    fig, ax = plt.subplots(figsize=(6, 6), dpi=100)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_aspect("equal")
    ax.set_facecolor("#111111")
    fig.patch.set_facecolor("#111111")
    ax.set_title(f"Generation {generation}  "
                 f"({len(snapshot.animals)} animals, {len(snapshot.foods)} food)",
                 color="white", fontsize=10)
    ax.tick_params(colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444444")

    if snapshot.foods:
        ax.scatter([f.x for f in snapshot.foods], [f.y for f in snapshot.foods],
                   c="#44FF44", s=6, linewidths=0, zorder=2)

    best = max((a.ate for a in snapshot.animals), default=0)
    for a in snapshot.animals:
        shade = 0.35 + 0.65 * (a.ate / best if best else 0.0)
        poly = mpatches.Polygon(_triangle(a.x, a.y, 0.01, a.rotation),
                                closed=True, fill=False,
                                edgecolor=(1.0, shade, shade), linewidth=0.8,
                                zorder=3)
        ax.add_patch(poly)

    filename = filename or f"gen_{generation:06d}.png"
    path = os.path.join(base, "snapshots", filename)
    plt.savefig(path, dpi=100, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Evolution statistics chart
# ──────────────────────────────────────────────────────────────────────────────

def save_evolution_chart(rows: list, base: str = SAVE_DIR,
                         filename: str = "evolution.png"):
    """
    Plot min / avg / max fitness across generations.
    `rows` are dicts with generation, min_fitness, max_fitness, avg_fitness.
    """
    if not rows:
        return None
    gens = [r["generation"]  for r in rows]
    mins = [r["min_fitness"] for r in rows]
    avgs = [r["avg_fitness"] for r in rows]
    maxs = [r["max_fitness"] for r in rows]

    fig, ax = plt.subplots(figsize=(12, 5), dpi=100)
    fig.patch.set_facecolor("#111111")
    ax.set_facecolor("#111111")

    ax.fill_between(gens, mins, maxs, color="#44FF44", alpha=0.15, zorder=1)
    ax.plot(gens, maxs, color="#44FF44", linewidth=1.0, label="Max", zorder=3)
    ax.plot(gens, avgs, color="#CC44FF", linewidth=1.4, label="Average", zorder=3)
    ax.plot(gens, mins, color="#FF8800", linewidth=1.0, alpha=0.8,
            label="Min", zorder=2)

    ax.set_xlabel("Generation", color="white")
    ax.set_ylabel("Food eaten", color="white")
    ax.tick_params(axis="both", colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444444")

    ax.legend(facecolor="#222222", labelcolor="white",
              loc="upper left", fontsize=8)
    ax.set_title("Evolutionary Progress", color="white", fontsize=12)
    plt.tight_layout()
    path = os.path.join(base, "charts", filename)
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# CSV log
# ──────────────────────────────────────────────────────────────────────────────

def append_csv(row: dict, base: str = SAVE_DIR):
    """Append one generation's stats to a CSV file."""
    if not LOG_CSV:
        return None
    path = os.path.join(base, "evolution_log.csv")
    file_exists = os.path.isfile(path)
    with open(path, "a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(row.keys()))
        if not file_exists:
            writer.writeheader()
        writer.writerow(row)
    return path
