"""
synthfit — Posterior Summaries
==============================
Reduces posterior draws to point estimates (posterior means, chains pooled)
and feeds them back through the generative function to obtain the predictive
curve used for posterior-predictive comparison.

No weighting, no outlier rejection and no interval computation happen here;
intervals and visual diagnostics are left to ArviZ and the plotting module.

License: MIT
"""

import numpy as np
import pandas as pd
from typing import Dict, Iterable, Mapping, Optional, Union

import arviz as az

from .core import DimensionMismatchError, ParamsLike, _as_mapping
from .model_spec import ModelSpecification


Draws = Mapping[str, np.ndarray]


def extract_draws(trace: Union[az.InferenceData, Draws],
                  var_names: Optional[Iterable[str]] = None) -> Dict[str, np.ndarray]:
    """Flatten posterior draws to one pooled sequence per parameter.

    Args:
        trace: InferenceData from the sampler, or a mapping name → draws
        var_names: Parameters to keep (all posterior variables if None)

    Returns:
        Dict of name → 1-D array of length chains × draws
    """
    if isinstance(trace, az.InferenceData):
        posterior = trace.posterior
        names = list(var_names) if var_names is not None else list(posterior.data_vars)
        draws = {}
        for name in names:
            if name not in posterior:
                raise KeyError(f"'{name}' not found in posterior draws")
            values = posterior[name].values
            # (chain, draw, *shape) → (chain * draw, *shape)
            draws[name] = values.reshape((-1,) + values.shape[2:])
        return draws

    names = list(var_names) if var_names is not None else list(trace)
    return {name: np.asarray(trace[name], dtype=float).reshape(-1) for name in names}


def point_estimates(draws: Draws, names: Optional[Iterable[str]] = None) -> Dict[str, float]:
    """Arithmetic mean of each parameter's pooled draws."""
    names = list(names) if names is not None else list(draws)
    estimates = {}
    for name in names:
        values = np.asarray(draws[name], dtype=float)
        if values.size == 0:
            raise ValueError(f"No draws for '{name}'")
        estimates[name] = float(values.mean())
    return estimates


def compare_to_truth(true_params: ParamsLike, estimates: Mapping[str, float]) -> pd.DataFrame:
    """Table of true value, posterior mean and errors per parameter."""
    truth = _as_mapping(true_params)
    mismatched = set(truth) ^ set(estimates)
    if mismatched:
        raise ValueError(f"Parameter names differ between truth and estimates: {sorted(mismatched)}")

    rows = []
    for name, true_value in truth.items():
        est = estimates[name]
        rows.append({
            'parameter': name,
            'true': float(true_value),
            'estimate': float(est),
            'abs_error': abs(est - true_value),
            'rel_error': abs(est - true_value) / abs(true_value) if true_value != 0 else np.nan,
        })
    return pd.DataFrame(rows).set_index('parameter')


class PosteriorSummarizer:
    """Point estimates and predictive curve for one model specification."""

    def __init__(self, spec: ModelSpecification):
        self.spec = spec
        self.generator = spec.generator

    def point_estimates(self, trace: Union[az.InferenceData, Draws]) -> Dict[str, float]:
        """Posterior means keyed by the physical parameter names."""
        draws = extract_draws(trace, self.spec.parameter_names)
        return point_estimates(draws, self.spec.parameter_names)

    def predictive_curve(self,
                         design_points: np.ndarray,
                         estimates: Mapping[str, float],
                         observed: Optional[np.ndarray] = None) -> np.ndarray:
        """Generative curve at the original design points using the estimates.

        Raises:
            DimensionMismatchError: if `observed` is given and lengths differ
        """
        x = np.asarray(design_points, dtype=float)
        curve = np.asarray(self.generator.signal(x, dict(estimates)), dtype=float)

        if len(curve) != len(x):
            raise DimensionMismatchError(
                f"Predictive curve has length {len(curve)}, design points {len(x)}"
            )
        if observed is not None and len(observed) != len(curve):
            raise DimensionMismatchError(
                f"Predictive curve has length {len(curve)}, observed sample {len(observed)}"
            )
        return curve

    def summarize(self,
                  trace: Union[az.InferenceData, Draws],
                  design_points: np.ndarray,
                  observed: Optional[np.ndarray] = None):
        """Return (point estimates, predictive curve)."""
        estimates = self.point_estimates(trace)
        return estimates, self.predictive_curve(design_points, estimates, observed)
