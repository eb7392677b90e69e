"""
synthfit — Bayesian Inference Boundary
======================================
Turns a ModelSpecification plus named data into a PyMC model and draws from
its posterior with MCMC (NUTS by default).

Key Features:
- PyMC model built from the structured specification (no embedded model text)
- Flat priors implied by bounds, or explicit PriorSpec per parameter
- Log reparameterization for positive growth parameters
- Exponential growth ODE integrated by PyMC's embedded solver
- Convergence diagnostics (R-hat, effective sample size, divergences)
- Posterior predictive sampling

Mathematical Framework:
    Bayes' Theorem: P(θ|D) ∝ P(D|θ) × P(θ)

    Linear:       y ~ Normal(intercept + slope·x, σ)
    Exponential:  y ~ LogNormal(log(amplitude·exp(rate·t)), σ)
    ODE:          y ~ LogNormal(log(y(t)), σ),  dy/dt = rate·y, y(0) = amplitude

Usage:
    from synthfit.bayesian import BayesianEstimator, BayesianConfig
    from synthfit.model_spec import linear_regression_spec

    spec = linear_regression_spec()
    bayes = BayesianEstimator(spec, BayesianConfig(n_chains=4, n_draws=1000))
    trace = bayes.sample(dataset.to_data(spec))
    summary = bayes.summarize_posterior(trace)

License: MIT
"""

import numpy as np
from dataclasses import dataclass, replace
from typing import Dict, Optional
import warnings

import arviz as az
import pymc as pm
from pymc.ode import DifferentialEquation

from .core import SamplerFailure
from .model_spec import LikelihoodFamily, ModelSpecification, ParameterSpec


# ═══════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════

@dataclass
class BayesianConfig:
    """Configuration for MCMC inference, passed explicitly to each call."""
    n_chains: int = 4              # Number of MCMC chains
    n_draws: int = 1000            # Samples per chain (post-warmup)
    n_tune: int = 1000             # Warmup / tuning steps
    target_accept: float = 0.8     # Target acceptance rate (NUTS)
    sampler: str = 'NUTS'          # Sampler: 'NUTS', 'Metropolis', 'Slice'

    # Computational
    cores: Optional[int] = None    # Parallelism hint, passed through to PyMC
    progressbar: bool = True       # Show progress bar
    random_seed: Optional[int] = 42
    keep_warmup: bool = False      # Keep tuning draws as 'warmup_posterior'

    # Diagnostics
    check_convergence: bool = True   # Report R-hat, ESS and divergences
    rhat_threshold: float = 1.01     # R-hat convergence threshold
    enforce_convergence: bool = False  # Raise SamplerFailure instead of warning

    def __post_init__(self):
        if self.n_chains < 1 or self.n_draws < 1 or self.n_tune < 0:
            raise ValueError(
                f"Invalid sampler sizes: chains={self.n_chains}, "
                f"draws={self.n_draws}, tune={self.n_tune}"
            )
        if self.sampler not in ('NUTS', 'Metropolis', 'Slice'):
            raise ValueError(f"Unknown sampler: {self.sampler}")


# ═══════════════════════════════════════════════════════════════
# Bayesian Estimator — Main Class
# ═══════════════════════════════════════════════════════════════

class BayesianEstimator:
    """Posterior sampling for one ModelSpecification.

    The sampler is an external collaborator: this class only translates the
    specification into a PyMC model, calls `pm.sample` and reports the
    diagnostics it returns.
    """

    def __init__(self,
                 spec: ModelSpecification,
                 config: Optional[BayesianConfig] = None,
                 verbose: bool = True):
        """
        Args:
            spec: Model specification to fit
            config: MCMC configuration (defaults if None)
            verbose: Print progress and diagnostics
        """
        self.spec = spec
        self.config = config or BayesianConfig()
        self.verbose = verbose

        # Populated after inference
        self.model = None
        self.trace = None
        self.diagnostics = None

        self._log(f"Initialized '{spec.name}' with parameters {spec.parameter_names}")
        self._log(f"Sampler: {self.config.sampler}, Chains: {self.config.n_chains}")

    def _log(self, message: str):
        if self.verbose:
            print(f"[Bayesian] {message}")

    # ───────────────────────────────────────────────────────────
    # Model construction
    # ───────────────────────────────────────────────────────────

    def _prior(self, param: ParameterSpec):
        """Create the free variable for one parameter (must be inside a model)."""
        name = param.sampled_name
        prior = param.prior

        if prior is None:
            # Implicit prior: flat over the declared support
            if param.log_scale or param.lower is None:
                return pm.Flat(name)
            if param.lower == 0:
                return pm.HalfFlat(name)
            raise ValueError(
                f"Implicit prior for '{param.name}' only supports lower=0, got {param.lower}"
            )

        # Explicit priors apply to the sampled variable (log_<name> on log scale)
        args = param.prior_args()

        if prior.distribution == 'normal':
            mu, sd = args
            if param.lower is not None and not param.log_scale:
                return pm.TruncatedNormal(name, mu=mu, sigma=sd, lower=param.lower)
            return pm.Normal(name, mu=mu, sigma=sd)

        elif prior.distribution == 'halfnormal':
            return pm.HalfNormal(name, sigma=args[0])

        elif prior.distribution == 'uniform':
            return pm.Uniform(name, lower=args[0], upper=args[1])

        return pm.Exponential(name, lam=args[0])

    def _curve(self, x: np.ndarray, params: Dict):
        """Deterministic curve as a PyTensor expression."""
        ode = self.spec.ode
        if ode is None:
            return self.spec.generator.signal(x, params, math=pm.math)

        ode_model = DifferentialEquation(
            func=ode.rhs,
            times=x,
            n_states=ode.n_states,
            n_theta=len(ode.theta),
            t0=ode.t0,
        )
        solution = ode_model(
            y0=[params[name] for name in ode.initial],
            theta=[params[name] for name in ode.theta],
        )
        return solution[:, 0]

    def build_model(self, data: Dict) -> pm.Model:
        """Build the PyMC model for `data`.

        Args:
            data: Named data block ('N', covariate, observed)

        Returns:
            PyMC model ready for sampling
        """
        spec = self.spec
        spec.validate_data(data)

        x = np.asarray(data[spec.covariate], dtype=float)
        y = np.asarray(data[spec.observed], dtype=float)

        with pm.Model() as model:
            params = {}
            for param in spec.parameters:
                rv = self._prior(param)
                if param.log_scale:
                    params[param.name] = pm.Deterministic(param.name, pm.math.exp(rv))
                else:
                    params[param.name] = rv

            curve = self._curve(x, params)
            sigma = params[spec.noise_parameter]

            if spec.likelihood == LikelihoodFamily.LOGNORMAL:
                pm.LogNormal(spec.observed, mu=pm.math.log(curve), sigma=sigma, observed=y)
            elif spec.likelihood == LikelihoodFamily.NORMAL:
                pm.Normal(spec.observed, mu=curve, sigma=sigma, observed=y)
            else:
                raise ValueError(f"Unsupported likelihood: {spec.likelihood}")

        return model

    # ───────────────────────────────────────────────────────────
    # Sampling
    # ───────────────────────────────────────────────────────────

    def sample(self, data: Dict) -> az.InferenceData:
        """Draw from the posterior via MCMC.

        Args:
            data: Named data block matching the specification

        Returns:
            arviz.InferenceData with posterior draws and sample stats

        Raises:
            SamplerFailure: the sampler raised, or diagnostics failed while
                `enforce_convergence` is set
        """
        cfg = self.config
        self._log(f"Observed N = {int(data['N'])}")

        self.model = self.build_model(data)

        with self.model:
            self._log("Starting MCMC sampling...")
            self._log(f"  Chains: {cfg.n_chains}, draws per chain: {cfg.n_draws}, "
                      f"tuning steps: {cfg.n_tune}")

            if cfg.sampler == 'NUTS':
                step = pm.NUTS(target_accept=cfg.target_accept)
            elif cfg.sampler == 'Metropolis':
                step = pm.Metropolis()
            else:
                step = pm.Slice()

            try:
                self.trace = pm.sample(
                    draws=cfg.n_draws,
                    tune=cfg.n_tune,
                    chains=cfg.n_chains,
                    step=step,
                    cores=cfg.cores,
                    progressbar=cfg.progressbar,
                    random_seed=cfg.random_seed,
                    discard_tuned_samples=not cfg.keep_warmup,
                    return_inferencedata=True,
                )
            except Exception as e:
                raise SamplerFailure(f"Sampling '{self.spec.name}' failed: {e}") from e

        if cfg.check_convergence:
            self.diagnostics = self.check_convergence(self.trace)

        self._log("Sampling complete!")
        return self.trace

    def check_convergence(self, trace: az.InferenceData) -> Dict:
        """Report R-hat, effective sample size and divergences.

        Diagnostics are reported, not acted upon, unless the configuration
        enforces convergence.
        """
        cfg = self.config
        names = [n for n in self.spec.parameter_names if n in trace.posterior]
        n_chains = trace.posterior.sizes['chain']
        total_samples = n_chains * trace.posterior.sizes['draw']

        self._log("Convergence Diagnostics:")

        rhat_values = {}
        if n_chains > 1:
            rhat = az.rhat(trace, var_names=names)
            self._log(f"  R-hat (target < {cfg.rhat_threshold}):")
            for var in names:
                rhat_values[var] = float(rhat[var].values)
                status = "✓" if rhat_values[var] < cfg.rhat_threshold else "✗ WARNING"
                self._log(f"    {var}: {rhat_values[var]:.4f} {status}")
        else:
            self._log("  R-hat needs at least 2 chains, skipped")

        ess = az.ess(trace, var_names=names)
        ess_values = {}
        self._log("  Effective Sample Size (ESS):")
        for var in names:
            ess_values[var] = float(ess[var].values)
            ratio = ess_values[var] / total_samples
            status = "✓" if ratio > 0.1 else "⚠ Low"
            self._log(f"    {var}: {ess_values[var]:.0f} ({ratio:.1%} of {total_samples}) {status}")

        divergences = 0
        if hasattr(trace, 'sample_stats') and 'diverging' in trace.sample_stats:
            divergences = int(trace.sample_stats['diverging'].values.sum())
            self._log(f"  Divergent transitions: {divergences}")

        failing = {k: v for k, v in rhat_values.items()
                   if not np.isfinite(v) or v >= cfg.rhat_threshold}
        diagnostics = {
            'rhat': rhat_values,
            'ess': ess_values,
            'divergences': divergences,
            'converged': not failing,
        }

        if failing:
            message = (f"'{self.spec.name}' did not converge: R-hat "
                       f"{', '.join(f'{k}={v:.3f}' for k, v in failing.items())} "
                       f"(threshold {cfg.rhat_threshold})")
            if cfg.enforce_convergence:
                raise SamplerFailure(message)
            warnings.warn(message, RuntimeWarning)

        if divergences:
            warnings.warn(f"'{self.spec.name}' had {divergences} divergent transitions",
                          RuntimeWarning)

        return diagnostics

    # ───────────────────────────────────────────────────────────
    # Reporting
    # ───────────────────────────────────────────────────────────

    def summarize_posterior(self,
                            trace: Optional[az.InferenceData] = None,
                            credible_interval: float = 0.95) -> Dict:
        """Generate summary statistics from the posterior.

        Args:
            trace: InferenceData (uses self.trace if None)
            credible_interval: HDI width (0.95 = 95% HDI)

        Returns:
            Dict with mean, median, std, HDI, R-hat and ESS per parameter
        """
        if trace is None:
            trace = self.trace

        if trace is None:
            raise ValueError("No trace available. Run sample() first.")

        names = [n for n in self.spec.parameter_names if n in trace.posterior]
        az_summary = az.summary(trace, var_names=names, hdi_prob=credible_interval)
        hdi_lower, hdi_upper = [c for c in az_summary.columns if c.startswith('hdi_')]

        summary = {}
        for var_name in az_summary.index:
            summary[var_name] = {
                'mean': float(az_summary.loc[var_name, 'mean']),
                'median': float(trace.posterior[var_name].median()),
                'std': float(az_summary.loc[var_name, 'sd']),
                'ci_lower': float(az_summary.loc[var_name, hdi_lower]),
                'ci_upper': float(az_summary.loc[var_name, hdi_upper]),
                'rhat': float(az_summary.loc[var_name, 'r_hat']) if 'r_hat' in az_summary.columns else None,
                'ess': float(az_summary.loc[var_name, 'ess_bulk']) if 'ess_bulk' in az_summary.columns else None,
            }

        return summary

    def posterior_predictive(self,
                             trace: Optional[az.InferenceData] = None) -> az.InferenceData:
        """Simulate replicated observations from the posterior draws.

        Extends the trace with a 'posterior_predictive' group.
        """
        if trace is None:
            trace = self.trace

        if trace is None or self.model is None:
            raise ValueError("No trace available. Run sample() first.")

        with self.model:
            pm.sample_posterior_predictive(
                trace,
                extend_inferencedata=True,
                random_seed=self.config.random_seed,
                progressbar=self.config.progressbar,
            )
        return trace


def sample(spec: ModelSpecification,
           data: Dict,
           iterations: int,
           chains: int,
           config: Optional[BayesianConfig] = None,
           verbose: bool = False) -> az.InferenceData:
    """Sample the posterior of `spec` given `data`.

    `iterations` is the number of retained draws per chain.
    """
    config = replace(config or BayesianConfig(), n_draws=iterations, n_chains=chains)
    return BayesianEstimator(spec, config, verbose=verbose).sample(data)
