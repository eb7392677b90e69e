"""
Unit tests for synthetic data generation
"""

import pytest
import numpy as np
import dataclasses

from synthfit.core import (
    LinearDataGenerator, ExponentialDataGenerator, ExponentialODEDataGenerator,
    LinearParams, ExponentialParams, NoiseModel, SyntheticDataset,
    InvalidParameterError, DimensionMismatchError, GENERATORS, get_generator
)


class TestLinearGenerator:
    """Test the affine model with additive Gaussian noise."""

    @pytest.fixture
    def generator(self):
        return LinearDataGenerator()

    def test_lengths_match_n(self, generator):
        """Design points, signal and observations all have length N."""
        for n in [1, 7, 100, 1000]:
            ds = generator.generate(LinearParams(), n=n, seed=0)
            assert len(ds.design_points) == len(ds.signal) == len(ds.observed) == n
            assert ds.n == n

    def test_design_points_in_range(self, generator):
        """Design points are drawn within [10, 100]."""
        ds = generator.generate(LinearParams(), n=500, seed=1)
        assert ds.design_points.min() >= 10.0
        assert ds.design_points.max() <= 100.0
        # Uniform, not evenly spaced
        assert not np.allclose(np.diff(np.sort(ds.design_points)),
                               np.diff(np.sort(ds.design_points))[0])

    def test_signal_is_affine(self, generator):
        """Signal equals intercept + slope * x."""
        params = LinearParams(intercept=2.0, slope=-3.0, sigma=20.0)
        ds = generator.generate(params, n=50, seed=2)
        np.testing.assert_allclose(ds.signal, 2.0 - 3.0 * ds.design_points)

    def test_signal_recomputes_exactly(self, generator):
        """Recomputing the signal from the true parameters is exact."""
        params = LinearParams(intercept=2.0, slope=-3.0, sigma=20.0)
        ds = generator.generate(params, n=100, seed=3)
        recomputed = generator.signal(ds.design_points, params)
        assert np.array_equal(recomputed, ds.signal)

    def test_additive_noise_statistics(self, generator):
        """Residuals are zero-mean Gaussian with the requested scale."""
        params = LinearParams(intercept=2.0, slope=-3.0, sigma=20.0)
        ds = generator.generate(params, n=20000, seed=4)
        residuals = ds.observed - ds.signal
        assert abs(residuals.mean()) < 0.5
        assert abs(residuals.std() - 20.0) < 0.5
        assert ds.noise_model == NoiseModel.ADDITIVE_GAUSSIAN

    def test_seed_reproducible(self, generator):
        """Same seed gives the same dataset; different seeds differ."""
        a = generator.generate(LinearParams(), n=30, seed=11)
        b = generator.generate(LinearParams(), n=30, seed=11)
        c = generator.generate(LinearParams(), n=30, seed=12)
        assert np.array_equal(a.observed, b.observed)
        assert not np.array_equal(a.observed, c.observed)

    def test_explicit_design_points(self, generator):
        """Explicit design points are used as given."""
        x = np.linspace(0, 1, 11)
        ds = generator.generate({'intercept': 1.0, 'slope': 2.0, 'sigma': 0.1},
                                design_points=x, seed=0)
        np.testing.assert_array_equal(ds.design_points, x)
        np.testing.assert_allclose(ds.signal, 1.0 + 2.0 * x)

    def test_custom_range(self):
        """x_range is configurable and must be increasing."""
        ds = LinearDataGenerator(x_range=(-1.0, 1.0)).generate(LinearParams(), n=100, seed=0)
        assert np.all(np.abs(ds.design_points) <= 1.0)
        with pytest.raises(InvalidParameterError):
            LinearDataGenerator(x_range=(5.0, 5.0))


class TestExponentialGenerator:
    """Test closed-form exponential growth with log-normal noise."""

    @pytest.fixture
    def generator(self):
        return ExponentialDataGenerator()

    def test_design_points_evenly_spaced(self, generator):
        """N=1000 on t_max=10 gives 0.01, 0.02, ..., 10.0."""
        ds = generator.generate(ExponentialParams(), n=1000, seed=0)
        np.testing.assert_allclose(ds.design_points, np.arange(1, 1001) * 0.01)
        assert ds.design_points[0] > 0
        assert ds.design_points[-1] == pytest.approx(10.0)

    def test_signal_closed_form(self, generator):
        """Signal equals amplitude * exp(rate * t)."""
        params = ExponentialParams(amplitude=0.8, rate=2.0, sigma=0.5)
        ds = generator.generate(params, n=100, seed=0)
        np.testing.assert_allclose(ds.signal, 0.8 * np.exp(2.0 * ds.design_points))
        assert np.array_equal(generator.signal(ds.design_points, params), ds.signal)

    def test_multiplicative_lognormal_noise(self, generator):
        """log(observed / signal) is Normal(0, sigma) and observations stay positive."""
        params = ExponentialParams(amplitude=0.8, rate=0.3, sigma=0.5)
        ds = generator.generate(params, n=20000, seed=5)
        eta = np.log(ds.observed / ds.signal)
        assert np.all(ds.observed > 0)
        assert abs(eta.mean()) < 0.02
        assert abs(eta.std() - 0.5) < 0.02
        assert ds.noise_model == NoiseModel.MULTIPLICATIVE_LOGNORMAL

    @pytest.mark.parametrize("field,value", [
        ('amplitude', 0.0), ('amplitude', -1.0), ('rate', 0.0), ('rate', -2.0),
    ])
    def test_positivity_constraints(self, generator, field, value):
        """Amplitude and rate must be positive for the log-normal models."""
        params = ExponentialParams().as_dict()
        params[field] = value
        with pytest.raises(InvalidParameterError):
            generator.generate(params, n=10)

    def test_overflow_warns_without_clamping(self, generator):
        """A signal that overflows is reported, not silently clamped."""
        params = ExponentialParams(amplitude=1.0, rate=200.0, sigma=0.1)
        with pytest.warns(RuntimeWarning, match="Non-finite signal"):
            ds = generator.generate(params, n=10, seed=0)
        assert np.isinf(ds.signal[-1])


class TestExponentialODEGenerator:
    """Test the ODE-integrated exponential."""

    @pytest.fixture
    def generator(self):
        return ExponentialODEDataGenerator()

    def test_ode_matches_closed_form(self, generator):
        """Integrated and closed-form curves agree within solver tolerance."""
        params = ExponentialParams(amplitude=0.8, rate=2.0, sigma=0.5)
        t = np.arange(1, 1001) * 0.01
        assert len(t) == 1000
        assert generator.ode_discrepancy(t, params) < 1e-4

    def test_rhs_growth(self, generator):
        """Right-hand side is rate * y."""
        assert generator.rhs([3.0], 0.0, [2.0]) == [6.0]

    def test_generate_uses_integrated_signal(self, generator):
        """Dataset signal comes from the integrator and lengths match."""
        params = ExponentialParams(amplitude=0.8, rate=2.0, sigma=0.5)
        ds = generator.generate(params, n=200, seed=0)
        assert len(ds.design_points) == len(ds.signal) == len(ds.observed) == 200
        np.testing.assert_allclose(ds.signal, generator.integrate(ds.design_points, params))
        np.testing.assert_allclose(ds.signal, generator.closed_form(ds.design_points, params),
                                   rtol=1e-4)

    def test_deterministic_signal(self, generator):
        """Integration is deterministic for fixed inputs."""
        params = ExponentialParams()
        t = np.linspace(0.1, 5, 50)
        assert np.array_equal(generator.integrate(t, params), generator.integrate(t, params))

    def test_time_grid_must_increase(self, generator):
        with pytest.raises(InvalidParameterError):
            generator.integrate(np.array([0.1, 0.3, 0.2]), ExponentialParams())

    def test_time_grid_before_t0(self, generator):
        with pytest.raises(InvalidParameterError):
            generator.integrate(np.array([-1.0, 0.5]), ExponentialParams())

    def test_grid_at_initial_time(self, generator):
        """A single design point at t0 is the initial condition."""
        params = ExponentialParams(amplitude=0.8, rate=2.0, sigma=0.5)
        np.testing.assert_array_equal(generator.integrate([0.0], params), [0.8])
        ds = generator.generate(params, design_points=[0.0], seed=0)
        assert ds.n == 1
        assert ds.signal[0] == 0.8

    def test_grid_starting_at_initial_time(self, generator):
        params = ExponentialParams(amplitude=0.8, rate=2.0, sigma=0.5)
        y = generator.integrate([0.0, 0.5, 1.0], params)
        np.testing.assert_allclose(y, 0.8 * np.exp(2.0 * np.array([0.0, 0.5, 1.0])), rtol=1e-6)


class TestValidation:
    """Test parameter validation shared by all generators."""

    @pytest.mark.parametrize("name", list(GENERATORS))
    @pytest.mark.parametrize("n", [0, -5, 2.5, True])
    def test_invalid_n(self, name, n):
        gen = get_generator(name)
        params = LinearParams() if name == 'linear' else ExponentialParams()
        with pytest.raises(InvalidParameterError):
            gen.generate(params, n=n)

    @pytest.mark.parametrize("sigma", [0.0, -0.1])
    def test_invalid_sigma(self, sigma):
        with pytest.raises(InvalidParameterError):
            LinearDataGenerator().generate(LinearParams(sigma=sigma), n=10)
        with pytest.raises(InvalidParameterError):
            ExponentialDataGenerator().generate(ExponentialParams(sigma=sigma), n=10)

    def test_missing_parameter(self):
        with pytest.raises(InvalidParameterError):
            LinearDataGenerator().generate({'intercept': 1.0, 'sigma': 1.0}, n=10)

    def test_n_or_design_points_required(self):
        with pytest.raises(InvalidParameterError):
            LinearDataGenerator().generate(LinearParams())

    def test_empty_design_points(self):
        with pytest.raises(InvalidParameterError):
            LinearDataGenerator().generate(LinearParams(), design_points=[])

    def test_unknown_generator(self):
        with pytest.raises(ValueError):
            get_generator('logistic')

    @pytest.mark.parametrize("name", list(GENERATORS))
    def test_default_params(self, name):
        gen = get_generator(name)
        params = gen.default_params()
        assert isinstance(params, gen.params_cls)
        assert gen.generate(params, n=5, seed=0).n == 5

    def test_numpy_integer_n(self):
        ds = LinearDataGenerator().generate(LinearParams(), n=np.int64(5), seed=0)
        assert ds.n == 5


class TestSyntheticDataset:
    """Test dataset invariants."""

    def test_length_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError):
            SyntheticDataset(
                design_points=np.arange(5.0),
                signal=np.arange(5.0),
                observed=np.arange(4.0),
                params={},
                noise_model=NoiseModel.ADDITIVE_GAUSSIAN,
                model='linear',
            )

    def test_params_are_immutable(self):
        params = LinearParams()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.slope = 1.0

    def test_to_data(self):
        from synthfit.model_spec import exponential_growth_spec
        spec = exponential_growth_spec()
        ds = ExponentialDataGenerator().generate(ExponentialParams(), n=20, seed=0)
        data = ds.to_data(spec)
        assert data['N'] == 20
        np.testing.assert_array_equal(data['t'], ds.design_points)
        np.testing.assert_array_equal(data['y'], ds.observed)
