"""Visualisation helpers (Matplotlib)."""
from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import matplotlib.pyplot as plt
import numpy as np

from .column import ChargeColumn, Element

__all__ = [
    "plot_detonation_sequence",
    "plot_em_profile",
]

DEFAULT_CMAP = plt.get_cmap("viridis")


def _save_or_show(fig, save_path: Path | None) -> None:
    if save_path is not None:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path.with_suffix(".png"), dpi=300, bbox_inches="tight")
        fig.savefig(save_path.with_suffix(".svg"), bbox_inches="tight")
    else:
        plt.show()
    plt.close(fig)


def plot_detonation_sequence(
    column: ChargeColumn,
    elements: Sequence[Element],
    save_path: Path | None = None,
) -> None:
    """Detonation time against depth, coloured by Em, with primers marked."""

    depth = np.array([column.charge_top_depth + e.centre_depth for e in elements])
    det_time = np.array([e.det_time for e in elements])
    em = np.array([e.em for e in elements])

    fig, ax = plt.subplots(figsize=(5, 6))
    sc = ax.scatter(det_time, depth, c=em, cmap=DEFAULT_CMAP, s=30)
    for primer in column.primers:
        ax.scatter(primer.fire_time, column.charge_top_depth + primer.depth, marker="*", s=150, c="red")
    fig.colorbar(sc, ax=ax, label="Em")

    ax.invert_yaxis()
    ax.set_xlabel("Detonation time [ms]")
    ax.set_ylabel("Depth from collar [m]")
    ax.set_title(f"Hole {column.hole_id or '?'}: detonation sequence")
    ax.grid(True, ls=":", lw=0.5)

    _save_or_show(fig, save_path)


def plot_em_profile(
    element_lists: List[Sequence[Element]],
    labels: List[str],
    save_path: Path | None = None,
) -> None:
    """Em per element index for several holes or primer layouts."""

    fig, ax = plt.subplots(figsize=(6, 4))
    for elements, label in zip(element_lists, labels):
        ax.step([e.index for e in elements], [e.em for e in elements], where="mid", label=label)

    ax.set_xlabel("Element index (0 = toe)")
    ax.set_ylabel("Em")
    ax.set_title("Element energy contribution")
    ax.grid(True, ls=":", lw=0.5)
    ax.legend()

    _save_or_show(fig, save_path)
