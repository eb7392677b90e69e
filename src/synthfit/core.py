"""
synthfit — Synthetic Data Generation
====================================
Generative layer for the three tutorial pipelines: a deterministic signal from
a parametric function, overlaid with a stochastic noise model.

Models:
  linear            y = intercept + slope * x          (additive Gaussian noise)
  exponential       y = amplitude * exp(rate * t)      (log-normal noise)
  exponential_ode   dy/dt = rate * y, y(0) = amplitude (log-normal noise)

The ODE variant integrates the growth equation numerically with SciPy and is
expected to agree with the closed form up to solver tolerance.

Usage:
    from synthfit.core import GENERATORS, LinearParams

    gen = GENERATORS['linear']()
    dataset = gen.generate(LinearParams(intercept=2.0, slope=-3.0, sigma=20.0),
                           n=100, seed=42)
    dataset.design_points, dataset.signal, dataset.observed

License: MIT
"""

import numpy as np
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple, Union
import warnings

from scipy.integrate import solve_ivp


# ═══════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════

class InvalidParameterError(ValueError):
    """Parameter set or sample size cannot be used for simulation."""


class DimensionMismatchError(ValueError):
    """Design points, signal, observations or predictions differ in length."""


class SamplerFailure(RuntimeError):
    """The external sampler raised, or reported non-convergence when enforced."""


# ═══════════════════════════════════════════════════════════════
# Parameter sets
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LinearParams:
    """True parameters for the linear regression model."""
    intercept: float = 2.0
    slope: float = -3.0
    sigma: float = 20.0     # Gaussian noise scale

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ExponentialParams:
    """True parameters for exponential growth (closed form and ODE).

    sigma is the scale of the log-normal multiplicative noise.
    """
    amplitude: float = 0.8
    rate: float = 2.0
    sigma: float = 0.5

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


ParamsLike = Union[LinearParams, ExponentialParams, Mapping[str, float]]


def _as_mapping(params: ParamsLike) -> Mapping[str, float]:
    if hasattr(params, 'as_dict'):
        return params.as_dict()
    return params


class NoiseModel(Enum):
    ADDITIVE_GAUSSIAN = 'additive_gaussian'
    MULTIPLICATIVE_LOGNORMAL = 'multiplicative_lognormal'


# ═══════════════════════════════════════════════════════════════
# Synthetic dataset
# ═══════════════════════════════════════════════════════════════

@dataclass
class SyntheticDataset:
    """One simulated run: design points, noiseless signal and noisy observations."""
    design_points: np.ndarray
    signal: np.ndarray
    observed: np.ndarray
    params: Dict[str, float]
    noise_model: NoiseModel
    model: str
    seed: Optional[int] = None

    def __post_init__(self):
        n = len(self.design_points)
        if len(self.signal) != n or len(self.observed) != n:
            raise DimensionMismatchError(
                f"design_points ({n}), signal ({len(self.signal)}) and "
                f"observed ({len(self.observed)}) must have the same length"
            )

    @property
    def n(self) -> int:
        return len(self.design_points)

    def to_data(self, spec) -> Dict[str, object]:
        """Named data block for the sampler, keyed by the specification's slots."""
        return {
            'N': self.n,
            spec.covariate: np.asarray(self.design_points, dtype=float),
            spec.observed: np.asarray(self.observed, dtype=float),
        }


# ═══════════════════════════════════════════════════════════════
# Data generators
# ═══════════════════════════════════════════════════════════════

class DataGenerator:
    """Base class: design points → noiseless signal → observed sample.

    Subclasses define `signal` and the design of the independent variable.
    """

    name: str = ''
    params_cls = None
    noise_model: NoiseModel = NoiseModel.ADDITIVE_GAUSSIAN
    curve_params: Tuple[str, ...] = ()
    positive_params: Tuple[str, ...] = ()

    def design_points(self, n: int, rng: np.random.Generator) -> np.ndarray:
        raise NotImplementedError

    def signal(self, x, params: ParamsLike, math=np):
        """Deterministic curve at `x`.

        `math` is the array namespace providing `exp`; pass `pymc.math` to
        build the same curve symbolically inside a model.
        """
        raise NotImplementedError

    def default_params(self):
        """Tutorial parameter set for this model."""
        return self.params_cls()

    def validate(self, params: ParamsLike, n: Optional[int] = None) -> Dict[str, float]:
        values = dict(_as_mapping(params))

        missing = [p for p in self.curve_params + ('sigma',) if p not in values]
        if missing:
            raise InvalidParameterError(f"Missing parameters for '{self.name}': {missing}")

        if n is not None:
            if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n <= 0:
                raise InvalidParameterError(f"N must be a positive integer, got {n!r}")

        if not values['sigma'] > 0:
            raise InvalidParameterError(f"Noise scale sigma must be > 0, got {values['sigma']}")

        for name in self.positive_params:
            if not values[name] > 0:
                raise InvalidParameterError(
                    f"'{name}' must be > 0 for the {self.name} model, got {values[name]}"
                )
        return values

    def apply_noise(self, signal: np.ndarray, sigma: float,
                    rng: np.random.Generator) -> np.ndarray:
        eta = rng.normal(0.0, sigma, size=len(signal))
        if self.noise_model == NoiseModel.MULTIPLICATIVE_LOGNORMAL:
            return signal * np.exp(eta)
        return signal + eta

    def generate(self,
                 params: ParamsLike,
                 n: Optional[int] = None,
                 design_points: Optional[Sequence[float]] = None,
                 seed: Optional[int] = None,
                 verbose: bool = False) -> SyntheticDataset:
        """Simulate one dataset from known parameters.

        Args:
            params: True parameter set (dataclass or mapping)
            n: Number of design points (ignored if design_points is given)
            design_points: Explicit independent-variable values
            seed: Seed for the noise (and random design points)

        Returns:
            SyntheticDataset with design points, signal and observed sample
        """
        if design_points is None and n is None:
            raise InvalidParameterError("Either n or design_points must be given")

        rng = np.random.default_rng(seed)

        if design_points is not None:
            x = np.asarray(design_points, dtype=float)
            if x.ndim != 1:
                raise InvalidParameterError(f"design_points must be 1-D, got shape {x.shape}")
            values = self.validate(params, len(x))
        else:
            values = self.validate(params, n)
            x = self.design_points(n, rng)

        with np.errstate(over='ignore'):
            y = np.asarray(self.signal(x, values), dtype=float)
        if not np.all(np.isfinite(y)):
            warnings.warn(
                f"[Data] Non-finite signal for '{self.name}' with {values}; "
                f"max design point {x.max():.3g} overflows the numeric range",
                RuntimeWarning,
            )

        observed = self.apply_noise(y, values['sigma'], rng)

        if verbose:
            print(f"[Data] {self.name}: N={len(x)}, params={values}, "
                  f"noise={self.noise_model.value}")

        return SyntheticDataset(
            design_points=x,
            signal=y,
            observed=observed,
            params=values,
            noise_model=self.noise_model,
            model=self.name,
            seed=seed,
        )


class LinearDataGenerator(DataGenerator):
    """Affine line with additive Gaussian noise; x drawn uniformly."""

    name = 'linear'
    params_cls = LinearParams
    noise_model = NoiseModel.ADDITIVE_GAUSSIAN
    curve_params = ('intercept', 'slope')

    def __init__(self, x_range: Tuple[float, float] = (10.0, 100.0)):
        if x_range[0] >= x_range[1]:
            raise InvalidParameterError(f"x_range must be increasing, got {x_range}")
        self.x_range = x_range

    def design_points(self, n: int, rng: np.random.Generator) -> np.ndarray:
        return rng.uniform(self.x_range[0], self.x_range[1], size=n)

    def signal(self, x, params: ParamsLike, math=np):
        p = _as_mapping(params)
        return p['intercept'] + p['slope'] * x


class ExponentialDataGenerator(DataGenerator):
    """Closed-form exponential growth with multiplicative log-normal noise."""

    name = 'exponential'
    params_cls = ExponentialParams
    noise_model = NoiseModel.MULTIPLICATIVE_LOGNORMAL
    curve_params = ('amplitude', 'rate')
    positive_params = ('amplitude', 'rate')

    def __init__(self, t_max: float = 10.0):
        if not t_max > 0:
            raise InvalidParameterError(f"t_max must be > 0, got {t_max}")
        self.t_max = t_max

    def design_points(self, n: int, rng: np.random.Generator) -> np.ndarray:
        # Evenly spaced, starting one step after zero: t_max/n, ..., t_max
        return np.arange(1, n + 1) * (self.t_max / n)

    def signal(self, x, params: ParamsLike, math=np):
        p = _as_mapping(params)
        return p['amplitude'] * math.exp(p['rate'] * x)

    def closed_form(self, t, params: ParamsLike) -> np.ndarray:
        return ExponentialDataGenerator.signal(self, np.asarray(t, dtype=float), params)


class ExponentialODEDataGenerator(ExponentialDataGenerator):
    """Exponential growth obtained by integrating dy/dt = rate * y.

    The trajectory starts at y(t0) = amplitude and is sampled at the design
    points. Noise is applied to the integrated trajectory.
    """

    name = 'exponential_ode'

    def __init__(self, t_max: float = 10.0, t0: float = 0.0,
                 method: str = 'LSODA', rtol: float = 1e-10, atol: float = 1e-12):
        super().__init__(t_max=t_max)
        self.t0 = t0
        self.method = method
        self.rtol = rtol
        self.atol = atol

    @staticmethod
    def rhs(y, t, theta):
        """Growth right-hand side in (state, time, parameters) order."""
        return [theta[0] * y[0]]

    def integrate(self, t, params: ParamsLike) -> np.ndarray:
        p = _as_mapping(params)
        t = np.asarray(t, dtype=float)
        if np.any(np.diff(t) <= 0):
            raise InvalidParameterError("ODE time grid must be strictly increasing")
        if t[0] < self.t0:
            raise InvalidParameterError(f"ODE time grid must start at or after t0={self.t0}")
        if t[-1] == self.t0:
            # Every design point sits on the initial condition
            return np.full(len(t), float(p['amplitude']))

        theta = [p['rate']]
        sol = solve_ivp(
            lambda tt, y: self.rhs(y, tt, theta),
            t_span=(self.t0, float(t[-1])),
            y0=[p['amplitude']],
            t_eval=t,
            method=self.method,
            rtol=self.rtol,
            atol=self.atol,
        )
        if not sol.success:
            raise RuntimeError(f"ODE integration failed: {sol.message}")
        return sol.y[0]

    def signal(self, x, params: ParamsLike, math=np):
        if math is not np:
            # Symbolic graphs use the closed form; the sampler integrates
            # through pymc.ode when the specification declares an ODE.
            return super().signal(x, params, math=math)
        return self.integrate(x, params)

    def ode_discrepancy(self, t, params: ParamsLike) -> float:
        """Max absolute relative difference between integrated and closed form."""
        closed = self.closed_form(t, params)
        integrated = self.integrate(t, params)
        return float(np.max(np.abs(integrated - closed) / np.abs(closed)))


GENERATORS: Dict[str, Callable[..., DataGenerator]] = {
    'linear': LinearDataGenerator,
    'exponential': ExponentialDataGenerator,
    'exponential_ode': ExponentialODEDataGenerator,
}


def get_generator(name: str, **kwargs) -> DataGenerator:
    if name not in GENERATORS:
        raise ValueError(f"Unknown model: {name}. Available: {list(GENERATORS)}")
    return GENERATORS[name](**kwargs)
