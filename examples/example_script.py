"""Build a small event table and graph it with tgrapher.

Run:
    python examples/example_script.py            # batch: writes graphs next to this script
    python examples/example_script.py --show     # also opens the window with a lasso cut
"""

import sqlite3
import sys
from contextlib import closing
from pathlib import Path

import numpy as np
import pandas as pd

from tgrapher.app.cli import main

here = Path(__file__).resolve().parent
out_dir = here / "output"
out_dir.mkdir(exist_ok=True)

rng = np.random.default_rng(seed=42)
n = 500
energy = rng.uniform(0, 1000, n)
df = pd.DataFrame({
    "energy": energy,
    "tof": 50 + 0.02 * energy + rng.normal(0, 2, n),
    "denergy": np.sqrt(energy) * 0.1,
    "dtof": np.full(n, 1.5),
    "location": rng.integers(0, 16, n),
    "qdc": rng.uniform(0, 4096, n),
})

db_path = out_dir / "run042.db"
with closing(sqlite3.connect(db_path)) as conn:
    df.to_sql("events", conn, if_exists="replace", index=False)
    conn.commit()

args = [
    str(db_path), "events", "energy", "tof",
    "--xerror", "denergy", "--yerror", "dtof",
    "--gate", "location", "0", "3",
    "--gate", "location", "12", "15",
    "--save", str(out_dir / "graphs.json"), "outer_locations",
]
if "--show" in sys.argv:
    args.append("--cut")
else:
    args.append("--batch")

sys.exit(main(args))
