"""
Plotting of simulation results.
Draws what a RunResult already contains; nothing is recomputed here.
"""

from typing import Dict, Optional, Tuple
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes


class PIDPlotter:
    """
    Plotting utilities for closed-loop runs.

    The two standard views are the response (reference vs true output)
    and the control signals (u and e).
    """

    def __init__(self, style: str = 'seaborn-v0_8-whitegrid'):
        """
        Initialize plotter.

        Args:
            style: Matplotlib style to use
        """
        if style in plt.style.available:
            plt.style.use(style)

        self._colors = {
            'reference': '#2ecc71',
            'output': '#3498db',
            'measured': '#95a5a6',
            'control': '#9b59b6',
            'error': '#e74c3c',
        }

    def draw_response(self, ax: Axes, result, show_measured: bool = False) -> Axes:
        """Reference and true output on an existing axis."""
        if show_measured:
            ax.plot(result.timestamps, result.y_measured, '-', color=self._colors['measured'],
                    linewidth=0.8, alpha=0.6, label='measured')
        ax.plot(result.timestamps, result.references, '--', color=self._colors['reference'],
                linewidth=2, label='reference r')
        ax.plot(result.timestamps, result.y_true, '-', color=self._colors['output'],
                linewidth=1.5, label='output')
        ax.set_xlabel('time [s]')
        ax.set_ylabel(result.output_label)
        ax.legend(loc='best')
        ax.grid(True, alpha=0.3)
        return ax

    def draw_control(self, ax: Axes, result) -> Axes:
        """Control input and error on an existing axis."""
        ax.plot(result.timestamps, result.outputs, '-', color=self._colors['control'],
                linewidth=2, label='u')
        ax.plot(result.timestamps, result.errors, '-', color=self._colors['error'],
                linewidth=1.5, label='e')
        ax.axhline(y=0, color='gray', linestyle=':', alpha=0.5)
        ax.set_xlabel('time [s]')
        ax.set_ylabel('u, e')
        ax.legend(loc='best')
        ax.grid(True, alpha=0.3)
        return ax

    def plot_response(
        self,
        result,
        title: Optional[str] = None,
        figsize: Tuple[int, int] = (10, 5),
        show_measured: bool = False
    ) -> Figure:
        """
        Plot reference vs output.

        Args:
            result: RunResult
            title: Plot title (scenario name if None)
            figsize: Figure size
            show_measured: Also draw the noisy measurement

        Returns:
            Matplotlib Figure
        """
        fig, ax = plt.subplots(figsize=figsize)
        self.draw_response(ax, result, show_measured=show_measured)
        ax.set_title(title or result.scenario_name, fontsize=14, fontweight='bold')
        plt.tight_layout()
        return fig

    def plot_control(
        self,
        result,
        title: str = "Control input u(t) and error e(t)",
        figsize: Tuple[int, int] = (10, 5)
    ) -> Figure:
        """Plot u and e over time."""
        fig, ax = plt.subplots(figsize=figsize)
        self.draw_control(ax, result)
        ax.set_title(title, fontsize=14, fontweight='bold')
        plt.tight_layout()
        return fig

    def plot_run(
        self,
        result,
        title: Optional[str] = None,
        figsize: Tuple[int, int] = (12, 8),
        show_measured: bool = False
    ) -> Figure:
        """
        Response and control signals stacked on a shared time axis,
        with the step metrics in the title.
        """
        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=figsize, sharex=True)
        self.draw_response(ax1, result, show_measured=show_measured)
        self.draw_control(ax2, result)
        ax1.set_xlabel('')

        fig.suptitle(
            f"{title or result.scenario_name}\n{format_metrics(result.metrics.to_dict())}",
            fontsize=12
        )
        plt.tight_layout()
        return fig

    @staticmethod
    def show():
        """Display all plots."""
        plt.show()

    @staticmethod
    def save(fig: Figure, path: str, dpi: int = 150):
        """Save figure to file."""
        fig.savefig(path, dpi=dpi, bbox_inches='tight')


def format_metrics(metrics: Dict[str, Optional[float]]) -> str:
    """One-line summary of step metrics, 'n/a' for undefined values."""
    def fmt(value: Optional[float], unit: str = "") -> str:
        return "n/a" if value is None else f"{value:.3f}{unit}"

    return (
        f"overshoot {fmt(metrics.get('overshoot_percent'), '%')}, "
        f"rise {fmt(metrics.get('rise_time'), ' s')}, "
        f"settling {fmt(metrics.get('settling_time'), ' s')}, "
        f"final {fmt(metrics.get('final_value'))}"
    )
