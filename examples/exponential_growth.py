"""
synthfit — Exponential Growth with Log-Normal Noise
===================================================
Simulates y = amplitude·exp(rate·t)·exp(η), η ~ Normal(0, σ), on 1000 evenly
spaced points in (0, 10], and recovers amplitude, rate and σ. Amplitude and
rate are sampled on the log scale.

Also shows the warmup phase in the trace plot and a posterior predictive
check.
"""

import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from synthfit import BayesianConfig, ExponentialParams, run_pipeline
from synthfit import BayesianEstimator
from synthfit import plotting


def main():
    print("╔══════════════════════════════════════════════════════════════╗")
    print("║  synthfit — Exponential Growth                               ║")
    print("╚══════════════════════════════════════════════════════════════╝")

    config = BayesianConfig(n_chains=4, n_draws=1000, n_tune=1000, keep_warmup=True)
    result = run_pipeline(
        'exponential',
        ExponentialParams(amplitude=0.8, rate=2.0, sigma=0.5),
        n=1000,
        seed=102,
        config=config,
        include_warmup=True,
        save_path='exponential_growth',
    )

    # Posterior predictive check on the fitted model
    bayes = BayesianEstimator(result.spec, config, verbose=False)
    bayes.model = bayes.build_model(result.dataset.to_data(result.spec))
    bayes.posterior_predictive(result.trace)
    plotting.plot_ppc(result.trace, save_path='exponential_growth')

    print(f"\nR-hat: {result.diagnostics['rhat']}")
    print("\n✓ Figures saved as exponential_growth_*.png")


if __name__ == '__main__':
    main()
