"""
synthfit - Bayesian parameter recovery from synthetic data

Simulates data from known generative models (linear regression, exponential
growth, exponential growth as an ODE), fits them with PyMC's NUTS sampler and
compares the posterior against the parameters that generated the data.
"""

__version__ = "0.1.0"

# Data generation
from .core import (
    DataGenerator,
    LinearDataGenerator,
    ExponentialDataGenerator,
    ExponentialODEDataGenerator,
    GENERATORS,
    get_generator,
    LinearParams,
    ExponentialParams,
    NoiseModel,
    SyntheticDataset,
    InvalidParameterError,
    DimensionMismatchError,
    SamplerFailure,
)

# Model specifications
from .model_spec import (
    ModelSpecification,
    ParameterSpec,
    PriorSpec,
    DataSlot,
    OdeSpec,
    LikelihoodFamily,
    MODEL_SPECS,
    get_model_spec,
    linear_regression_spec,
    exponential_growth_spec,
    exponential_ode_spec,
)

# Inference and summaries
from .bayesian import BayesianEstimator, BayesianConfig, sample
from .posterior import PosteriorSummarizer, extract_draws, point_estimates, compare_to_truth

# Pipelines
from .workflow import run_pipeline, PipelineResult

__all__ = [
    "DataGenerator",
    "LinearDataGenerator",
    "ExponentialDataGenerator",
    "ExponentialODEDataGenerator",
    "GENERATORS",
    "get_generator",
    "LinearParams",
    "ExponentialParams",
    "NoiseModel",
    "SyntheticDataset",
    "InvalidParameterError",
    "DimensionMismatchError",
    "SamplerFailure",
    "ModelSpecification",
    "ParameterSpec",
    "PriorSpec",
    "DataSlot",
    "OdeSpec",
    "LikelihoodFamily",
    "MODEL_SPECS",
    "get_model_spec",
    "linear_regression_spec",
    "exponential_growth_spec",
    "exponential_ode_spec",
    "BayesianEstimator",
    "BayesianConfig",
    "sample",
    "PosteriorSummarizer",
    "extract_draws",
    "point_estimates",
    "compare_to_truth",
    "run_pipeline",
    "PipelineResult",
]
