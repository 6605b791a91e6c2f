"""
Comparison plots for a benchmark CSV (written by drbgbench.bench.export_csv).

2x2 figure: generation time vs length (log/log), throughput, bias from 50%
and the internal state size of each mechanism.
"""
from __future__ import annotations
import logging
import os

import matplotlib
import matplotlib.pyplot as plt
import pandas as pd

from .report import COLORS, FALLBACK_COLOR

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"DRBG", "NumBits", "GenerationTimeUs", "StateSize", "Bias", "BitsPerMicrosecond"}


def load_frame(csv_path) -> pd.DataFrame:
    df = pd.read_csv(csv_path)
    if not REQUIRED_COLUMNS.issubset(df.columns):
        raise ValueError(f"CSV must contain columns: {sorted(REQUIRED_COLUMNS)}. Found: {df.columns.tolist()}")
    df["NumBits"] = df["NumBits"].astype(int)
    return df


def build_figure(df: pd.DataFrame):
    drbgs = list(df["DRBG"].unique())
    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle("DRBG Performance Comparison", fontsize=16, fontweight="bold")

    panels = [
        (axes[0, 0], "GenerationTimeUs", 1, "o", "Generation Time (us)", "Time Complexity"),
        (axes[0, 1], "BitsPerMicrosecond", 1, "s", "Throughput (bits/us)", "Generation Throughput"),
        (axes[1, 0], "Bias", 100, "^", "Bias from 50% (%)", "Bit Distribution Bias"),
    ]
    for ax, column, scale, marker, ylabel, title in panels:
        for drbg in drbgs:
            data = df[df["DRBG"] == drbg].sort_values("NumBits")
            ax.plot(data["NumBits"], data[column] * scale, marker=marker, label=drbg,
                    color=COLORS.get(drbg, FALLBACK_COLOR), linewidth=2)
        ax.set_xscale("log")
        ax.set_xlabel("Sequence Length (bits)")
        ax.set_ylabel(ylabel)
        ax.set_title(title, fontweight="bold")
        ax.legend()
        ax.grid(True, alpha=0.3)
    axes[0, 0].set_yscale("log")
    axes[1, 0].axhline(y=0, color="gray", linestyle="--", alpha=0.5)

    ax = axes[1, 1]
    sizes = [int(df[df["DRBG"] == drbg]["StateSize"].iloc[0]) for drbg in drbgs]
    bars = ax.bar(drbgs, sizes, color=[COLORS.get(d, FALLBACK_COLOR) for d in drbgs])
    ax.set_xlabel("DRBG Algorithm")
    ax.set_ylabel("State Size (bytes)")
    ax.set_title("Memory Footprint", fontweight="bold")
    ax.grid(True, alpha=0.3, axis="y")
    for bar, size in zip(bars, sizes):
        ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height() + 1, f"{size}",
                ha="center", va="bottom", fontsize=10)

    fig.tight_layout()
    return fig


def plot_results(csv_path, out_png, out_svg=None, show=False):
    if not show:
        matplotlib.use("Agg")
    fig = build_figure(load_frame(csv_path))
    for out in (out_png, out_svg):
        if out:
            os.makedirs(os.path.dirname(str(out)) or ".", exist_ok=True)
            fig.savefig(out, dpi=150, bbox_inches="tight")
            logger.info("Plot saved to %s", out)
    if show:
        plt.show()
    plt.close(fig)
    return fig
