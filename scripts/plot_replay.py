"""
Plots raw OCR readings against the analyzer's trusted values for a reading log.
Useful to tune the noise filters: rejected ticks show up as gaps between the curves.

    python scripts/plot_replay.py recordings/hunt.jsonl --out hunt.png
"""
import argparse
import os
import sys

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from hunt_tracker.core.analyzer import HuntAnalyzer
from hunt_tracker.services.replay_source import ReplayReadingSource


def collect_series(path):
    """Runs the log through a fresh analyzer. Returns dict of numpy arrays (NaN = no value)."""
    source = ReplayReadingSource(path)
    if not source.initialize():
        raise SystemExit(f"Cannot read {path}")

    analyzer = HuntAnalyzer(clock=source.clock)
    rows = []
    level_ups = []
    while True:
        reading = source.read()
        if reading is None: break
        snapshot = analyzer.analyze(reading)
        t_min = (source.clock() - rows[0][0]) / 60000 if rows else 0.0
        if snapshot.is_level_up:
            level_ups.append(t_min)
        rows.append((
            source.clock(),
            reading.exp_value, snapshot.exp.current,
            reading.currency, snapshot.currency.current,
        ))

    def column(i):
        return np.array([np.nan if r[i] is None else r[i] for r in rows], dtype=float)

    t = column(0)
    return {
        "t": (t - t[0]) / 60000 if len(t) else t,
        "raw_exp": column(1),
        "exp": column(2),
        "raw_currency": column(3),
        "currency": column(4),
        "level_ups": np.array(level_ups, dtype=float),
    }


def plot(series, out_path):
    fig, (ax_exp, ax_cur) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax_exp.plot(series["t"], series["raw_exp"], ".", color="orange", alpha=0.5, label="raw EXP")
    ax_exp.plot(series["t"], series["exp"], color="green", linewidth=2, label="trusted EXP")
    for t in series["level_ups"]:
        ax_exp.axvline(x=t, color="gold", linestyle=":", alpha=0.7)
    ax_exp.set_ylabel("EXP")
    ax_exp.legend()
    ax_exp.grid(True, alpha=0.2)

    ax_cur.plot(series["t"], series["raw_currency"], ".", color="orange", alpha=0.5, label="raw currency")
    ax_cur.plot(series["t"], series["currency"], color="steelblue", linewidth=2, label="trusted currency")
    ax_cur.set_xlabel("Time (minutes)")
    ax_cur.set_ylabel("Currency")
    ax_cur.legend()
    ax_cur.grid(True, alpha=0.2)

    rejected = np.sum(~np.isnan(series["raw_exp"]) & (series["raw_exp"] != series["exp"]))
    fig.suptitle(f"Raw vs trusted ({int(rejected)} EXP ticks carried forward)")
    fig.savefig(out_path, dpi=100)
    plt.close(fig)
    return out_path


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("log", help="JSONL reading log")
    parser.add_argument("--out", default="replay.png", help="Output image")
    args = parser.parse_args(argv)

    series = collect_series(args.log)
    print(f"Saved {plot(series, args.out)}")


if __name__ == "__main__":
    main()
