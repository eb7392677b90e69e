"""
Pytest configuration and fixtures for reproducible testing.

This file provides centralized test configuration including:
- Random seed management for reproducibility
- Non-interactive matplotlib backend
- Shared fixtures
"""
import os
import sys

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), 'src'))


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: runs the MCMC sampler end to end")


@pytest.fixture(scope="session", autouse=True)
def set_random_seeds():
    """Set the global NumPy seed once per test session."""
    np.random.seed(42)
    yield


@pytest.fixture(scope="function")
def reset_seeds():
    """Reset the global NumPy seed before a test that draws from it."""
    np.random.seed(42)
    yield


@pytest.fixture(autouse=True)
def close_figures():
    """Close figures created during a test."""
    yield
    plt.close('all')


@pytest.fixture
def fast_config():
    """Small, single-process sampler configuration."""
    from synthfit.bayesian import BayesianConfig
    return BayesianConfig(
        n_chains=2,
        n_draws=300,
        n_tune=300,
        cores=1,
        progressbar=False,
        random_seed=7,
    )
