"""
synthfit — Diagnostic Plots
===========================
Trace plots, pairs plots and posterior-predictive overlays.

Creates:
1. Trace plots (value vs iteration, optionally including warmup)
2. Pair plot (parameter correlations, divergences highlighted)
3. Fit overlay (observed data, true signal, predictive curve)
4. Predicted vs observed scatter with identity line
5. Posterior predictive check (when a posterior_predictive group exists)

Every function returns the matplotlib Figure; nothing downstream consumes it.

License: MIT
"""

import numpy as np
from typing import List, Optional, Sequence

import arviz as az
import matplotlib.pyplot as plt
import seaborn as sns

sns.set_style('whitegrid')


def _finish(fig, save_path: Optional[str], suffix: str, show: bool):
    fig.tight_layout()
    if save_path:
        fig.savefig(f"{save_path}_{suffix}.png", dpi=150, bbox_inches='tight')
    if show:
        plt.show()
    return fig


def _var_names(trace: az.InferenceData, var_names: Optional[Sequence[str]]) -> List[str]:
    if var_names is not None:
        return list(var_names)
    return list(trace.posterior.data_vars)


def plot_trace(trace: az.InferenceData,
               var_names: Optional[Sequence[str]] = None,
               include_warmup: bool = False,
               save_path: Optional[str] = None,
               show: bool = False):
    """Value vs iteration for each parameter and chain.

    With include_warmup the tuning draws (kept via
    `BayesianConfig.keep_warmup`) are drawn before the retained draws and a
    vertical line marks the end of warmup.
    """
    names = _var_names(trace, var_names)
    has_warmup = include_warmup and hasattr(trace, 'warmup_posterior')

    fig, axes = plt.subplots(len(names), 1, figsize=(12, 2.5 * len(names)),
                             sharex=True, squeeze=False)

    for ax, name in zip(axes[:, 0], names):
        draws = trace.posterior[name].values
        offset = 0
        if has_warmup:
            warmup = trace.warmup_posterior[name].values
            offset = warmup.shape[1]
            draws = np.concatenate([warmup, draws], axis=1)

        for chain in range(draws.shape[0]):
            ax.plot(np.arange(draws.shape[1]), draws[chain], lw=0.6, alpha=0.8,
                    label=f"chain {chain}")
        if has_warmup:
            ax.axvline(offset, color='k', ls='--', lw=1)
        ax.set_ylabel(name)

    axes[-1, 0].set_xlabel('Iteration')
    axes[0, 0].legend(loc='upper right', fontsize='small')
    return _finish(fig, save_path, 'trace', show)


def plot_pairs(trace: az.InferenceData,
               var_names: Optional[Sequence[str]] = None,
               save_path: Optional[str] = None,
               show: bool = False):
    """Pairwise scatter of posterior draws."""
    names = _var_names(trace, var_names)
    divergences = hasattr(trace, 'sample_stats') and 'diverging' in trace.sample_stats
    axes = az.plot_pair(trace, var_names=names, divergences=divergences,
                        figsize=(3 * len(names), 3 * len(names)))
    fig = np.atleast_1d(axes).ravel()[0].get_figure()
    return _finish(fig, save_path, 'pairs', show)


def plot_fit(design_points: np.ndarray,
             observed: np.ndarray,
             predictive: np.ndarray,
             signal: Optional[np.ndarray] = None,
             log_y: bool = False,
             title: Optional[str] = None,
             save_path: Optional[str] = None,
             show: bool = False):
    """Observed data with the predictive curve (and true signal) overlaid."""
    x = np.asarray(design_points)
    order = np.argsort(x)

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.scatter(x, observed, s=12, alpha=0.6, color='tab:blue', label='Observed')
    if signal is not None:
        ax.plot(x[order], np.asarray(signal)[order], color='k', ls='--', lw=1.5,
                label='True signal')
    ax.plot(x[order], np.asarray(predictive)[order], color='tab:red', lw=2,
            label='Posterior mean fit')

    if log_y:
        ax.set_yscale('log')
    ax.set_xlabel('Design point')
    ax.set_ylabel('Value')
    if title:
        ax.set_title(title)
    ax.legend()
    return _finish(fig, save_path, 'fit', show)


def plot_predicted_vs_observed(observed: np.ndarray,
                               predictive: np.ndarray,
                               log_scale: bool = False,
                               save_path: Optional[str] = None,
                               show: bool = False):
    """Scatter of predicted vs observed values with the y = x reference line."""
    observed = np.asarray(observed)
    predictive = np.asarray(predictive)

    fig, ax = plt.subplots(figsize=(6, 6))
    sns.scatterplot(x=observed, y=predictive, ax=ax, s=15, alpha=0.6)

    lo = min(observed.min(), predictive.min())
    hi = max(observed.max(), predictive.max())
    ax.plot([lo, hi], [lo, hi], color='k', ls='--', lw=1, label='y = x')

    if log_scale:
        ax.set_xscale('log')
        ax.set_yscale('log')
    ax.set_xlabel('Observed')
    ax.set_ylabel('Predicted')
    ax.legend()
    return _finish(fig, save_path, 'pred_vs_obs', show)


def plot_ppc(trace: az.InferenceData,
             save_path: Optional[str] = None,
             show: bool = False):
    """Posterior predictive check from the 'posterior_predictive' group."""
    if not hasattr(trace, 'posterior_predictive'):
        raise ValueError("Trace has no posterior_predictive group. "
                         "Run BayesianEstimator.posterior_predictive() first.")
    ax = az.plot_ppc(trace, num_pp_samples=100)
    fig = np.atleast_1d(ax).ravel()[0].get_figure()
    return _finish(fig, save_path, 'ppc', show)
