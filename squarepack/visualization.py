"""
Visualization for Square Packing

Draws the container with the packed squares (overlapping or escaping
squares highlighted) and the best/mean fitness history of a run.
"""

import matplotlib.pyplot as plt
import matplotlib.patches as patches
import numpy as np
from typing import List, Optional, Sequence, Tuple

from .config_loader import PackingConfig
from .geometry import EPSILON, Square, inside_container, overlap_area


class PackingVisualizer:
    """Visualization system for packing runs"""

    def __init__(self, config: PackingConfig):
        self.config = config
        self.colors = {
            "valid": "tab:blue",
            "overlap": "tab:red",
            "outside": "tab:orange",
            "container": "black",
        }

    def _classify(self, squares: Sequence[Square]) -> List[str]:
        """Color key per square: outside beats overlap beats valid"""
        overlapping = set()
        for i in range(len(squares)):
            for j in range(i + 1, len(squares)):
                if overlap_area(squares[i], squares[j]) > EPSILON:
                    overlapping.update((i, j))

        keys = []
        for index, square in enumerate(squares):
            if not inside_container(square, self.config.container_side):
                keys.append("outside")
            elif index in overlapping:
                keys.append("overlap")
            else:
                keys.append("valid")
        return keys

    def plot_packing(self,
                     squares: Sequence[Square],
                     ax: plt.Axes = None,
                     title: Optional[str] = None,
                     show_indices: bool = True):
        """Plot the container and every square of a packing"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(8, 8))

        side = self.config.container_side
        ax.add_patch(patches.Rectangle(
            (0, 0), side, side, fill=False,
            edgecolor=self.colors["container"], linewidth=2
        ))

        for index, (square, key) in enumerate(zip(squares, self._classify(squares))):
            vertices = [(v.x, v.y) for v in square.vertices()]
            color = self.colors[key]
            ax.add_patch(patches.Polygon(
                vertices, closed=True, facecolor=color, edgecolor="black",
                alpha=0.45, linewidth=1
            ))
            if show_indices:
                ax.text(square.center.x, square.center.y, str(index),
                        ha='center', va='center', fontsize=8)

        margin = 0.15 * side
        ax.set_xlim(-margin, side + margin)
        ax.set_ylim(-margin, side + margin)
        ax.set_aspect("equal")
        ax.set_title(title or f"{len(squares)} squares in L={side:g}")
        ax.grid(True, alpha=0.3)

        handles = [patches.Patch(color=self.colors[k], alpha=0.45, label=k)
                   for k in ("valid", "overlap", "outside")]
        ax.legend(handles=handles, loc='upper right', fontsize=8)

    def plot_fitness_history(self, records, ax: plt.Axes = None):
        """Plot best and mean fitness per generation (log scale when positive)"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(8, 5))

        records = [r for r in records if r.generation > 0]
        if not records:
            ax.text(0.5, 0.5, "No generation data", ha='center', va='center', transform=ax.transAxes)
            return

        generations = np.array([r.generation for r in records])
        best = np.array([r.best_fitness for r in records])
        mean = np.array([r.mean_fitness for r in records])

        ax.plot(generations, best, label="best", color="tab:green", linewidth=1.5)
        ax.plot(generations, mean, label="mean", color="tab:gray", linewidth=1, alpha=0.8)

        if np.all(best > 0) and np.all(mean > 0):
            ax.set_yscale("log")

        ax.set_xlabel("Generation")
        ax.set_ylabel("Fitness (penalty)")
        ax.set_title("Fitness History")
        ax.legend()
        ax.grid(True, alpha=0.3)

    def plot_run_summary(self,
                         snapshot,
                         records,
                         figsize: Tuple[int, int] = (14, 7),
                         save_path: Optional[str] = None,
                         show: bool = True):
        """
        Two-panel figure: best packing and fitness history

        Args:
            snapshot: GenerationSnapshot of the best gene
            records: Per-generation statistics records
            figsize: Figure size (width, height)
            save_path: Optional path to save the figure
            show: Display the figure interactively
        """
        fig, (ax_packing, ax_history) = plt.subplots(1, 2, figsize=figsize)

        self.plot_packing(
            snapshot.best_squares,
            ax_packing,
            title=f"Generation {snapshot.generation}: fitness {snapshot.best_fitness:.4f}"
        )
        self.plot_fitness_history(records, ax_history)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()

        plt.close(fig)
