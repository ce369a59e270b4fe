"""
Quick demo – runs a short, seeded simulation with small generations
and saves snapshots + charts without needing a display.
"""
from main import main

OUT = "output/demo"

if __name__ == "__main__":
    main([
        "--gens", "30",
        "--animals", "30",
        "--foods", "50",
        "--steps", "500",
        "--seed", "42",
        "--snapshot_interval", "5",
        "--outdir", OUT,
    ])
    print("\nAll outputs in:", OUT)
