"""
Figures for simulation results.

The plotting functions only consume the results table (and the summary derived
from it) and return matplotlib figures.
"""

from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from .aggregation import summarize_results
from .coefficients import true_sparsity


def snr_breaks(snr_values, n_breaks: int = 4) -> np.ndarray:
    """Tick positions evenly spaced on the log scale, rounded to 2 decimals."""
    log_snr = np.log(np.asarray(snr_values, dtype=float))
    return np.round(np.exp(np.linspace(log_snr.min(), log_snr.max(), n_breaks)), 2)


def default_violin_levels(snr_values) -> Tuple[float, ...]:
    """Second and seventh SNR grid values, or first and last on short grids."""
    levels = np.sort(np.unique(snr_values))
    if len(levels) >= 7:
        return (levels[1], levels[6])
    if len(levels) >= 2:
        return (levels[0], levels[-1])
    return (levels[0],)


def _line_panel(ax, summary, mean_col, sd_col, ylabel, breaks):
    for method, group in summary.groupby('Method', sort=True):
        ax.errorbar(
            group['SNR'], group[mean_col], yerr=group[sd_col],
            marker='o', linewidth=1.5, capsize=3, label=method,
        )
    ax.set_xscale('log')
    ax.set_xticks(breaks)
    ax.set_xticklabels([f"{b:g}" for b in breaks])
    ax.minorticks_off()
    ax.set_xlabel('Signal-to-noise ratio')
    ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3)


def plot_simulation_results(
    results: pd.DataFrame,
    beta,
    title: str = 'Simulation Results',
    snr_levels: Optional[Sequence[float]] = None,
    figsize: Tuple[int, int] = (12, 9),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """
    Four-panel summary of a simulation study.

    Panels: retention frequency, number of nonzero coefficients (with the true
    sparsity as a dotted line), mean prediction error, and a split violin plot
    of nonzero counts at two SNR levels.

    Parameters
    ----------
    results : pd.DataFrame
        Results table from ``run_study``.
    beta : array-like
        True coefficient vector of the study.
    title : str
        Figure title.
    snr_levels : sequence of float, optional
        SNR values shown in the violin panel, matched after rounding to two
        decimals. Defaults to ``default_violin_levels``.
    figsize : tuple, default=(12, 9)
        Figure size.
    save_path : str, optional
        If provided, save figure to this path.

    Returns
    -------
    plt.Figure
        Matplotlib figure object.
    """
    sparsity = true_sparsity(beta)
    summary = summarize_results(results, sparsity)
    breaks = snr_breaks(summary['SNR'])

    fig, axes = plt.subplots(2, 2, figsize=figsize)
    fig.suptitle(title, fontsize=14, fontweight='bold', x=0.02, ha='left')

    ax1 = axes[0, 0]
    _line_panel(ax1, summary, 'Mean_Ret', 'SD_Ret', 'Retention Frequency', breaks)
    ax1.set_yticks(np.round(np.linspace(0, 100, 5)))

    ax2 = axes[0, 1]
    _line_panel(ax2, summary, 'Mean_Zero', 'SD_Zero', 'Number of Nonzero Coeff', breaks)
    ax2.axhline(sparsity, color='black', linestyle=':', linewidth=1)

    ax3 = axes[1, 0]
    _line_panel(ax3, summary, 'Mean_Pred', 'SD_Pred', 'Mean-squared Prediction Error', breaks)
    ax3.set_ylim(bottom=0)

    ax4 = axes[1, 1]
    if snr_levels is None:
        snr_levels = default_violin_levels(results['SNR'])
    # levels match at the two-decimal precision shown in the legend
    shown = results['SNR'].round(2)
    violin_data = results[shown.isin(np.round(snr_levels, 2))].copy()
    violin_data['SNR'] = violin_data['SNR'].round(2).astype(str)
    sns.violinplot(
        data=violin_data, x='Method', y='Nonzero', hue='SNR',
        split=violin_data['SNR'].nunique() == 2,
        palette='Dark2', inner=None, cut=0, linecolor='white', ax=ax4,
    )
    ax4.set_xlabel('')
    ax4.set_ylabel('Number of Nonzero Coeff')
    ax4.legend(title='SNR', loc='upper right')

    handles, labels = ax1.get_legend_handles_labels()
    fig.legend(handles, labels, title='Method', loc='center right')
    fig.tight_layout(rect=(0, 0, 0.85, 0.95))

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
