"""
synthfit — Test Suite
=====================

Test modules:
- test_core.py: data generators, noise models, validation, ODE agreement
- test_model_spec.py: model specifications and Stan rendering
- test_posterior.py: point estimates, predictive curves, truth comparison
- test_bayesian.py: PyMC model building, diagnostics, sampler failures
- test_plotting.py: diagnostic figures
- test_workflow.py: end-to-end pipelines (parameter recovery tests are slow)
"""
