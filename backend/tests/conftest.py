"""
Pytest configuration and shared fixtures.

This module provides common fixtures for all test modules.
"""

import pytest
import numpy as np
from typing import Dict, Any, Iterator, List
from fastapi.testclient import TestClient

from formulation.config import Settings, get_settings
from formulation.core.params import LinearCoefficients, PREDICTORS
from formulation.db.database import Database, get_db
from formulation.main import app


# Ground-truth linear models used to generate synthetic samples.
# Weights follow PREDICTORS order.
TRUE_MODELS = {
    'tar': (15.0, [-10.0, -0.0005, -0.01, 0.05, -20.0]),
    'nicotine': (1.2, [-0.8, -0.00004, -0.001, 0.004, -1.5]),
    'co': (9.0, [-7.0, -0.0003, -0.02, 0.03, -10.0]),
}


def true_yields(params: Dict[str, float]) -> Dict[str, float]:
    """Noise-free yields of the ground-truth models."""
    x = np.array([float(params[name]) for name in PREDICTORS])
    return {
        response: float(intercept + x @ np.array(weights))
        for response, (intercept, weights) in TRUE_MODELS.items()
    }


# Database fixtures
@pytest.fixture
def database() -> Iterator[Database]:
    """Fresh in-memory database per test."""
    db = Database("sqlite://").open()
    yield db
    db.close()


@pytest.fixture
def db_session(database):
    """Session on the in-memory database."""
    session = database.session()
    yield session
    session.close()


# Sample fixtures
@pytest.fixture
def diagonal_samples() -> List[Dict[str, Any]]:
    """Six samples on the diagonal [k]*5 with y = 2*x0 + 3*x1 + x2 + 10 for every response."""
    samples = []
    for k in range(6):
        y = 2 * k + 3 * k + k + 10
        samples.append({
            'code': f'D{k}',
            'filter_ventilation': k,
            'filter_pressure_drop': k,
            'permeability': k,
            'quantitative': k,
            'citrate': k,
            'tar': y,
            'nicotine': y,
            'co': y,
        })
    return samples


@pytest.fixture
def synthetic_samples() -> List[Dict[str, Any]]:
    """Twelve noise-free samples spread over realistic parameter ranges."""
    rng = np.random.default_rng(42)
    samples = []
    for i in range(12):
        params = {
            'filter_ventilation': round(float(rng.uniform(0.2, 0.8)), 3),
            'filter_pressure_drop': int(rng.integers(3800, 5900)),
            'permeability': round(float(rng.uniform(40, 85)), 1),
            'quantitative': round(float(rng.uniform(25, 33)), 1),
            'citrate': round(float(rng.uniform(0.009, 0.022)), 3),
        }
        samples.append({'code': f'S{i:02d}', **params, **true_yields(params)})
    return samples


@pytest.fixture
def baseline() -> Dict[str, float]:
    """Baseline sample with the ground-truth yields as measured values."""
    params = {
        'filter_ventilation': 0.4,
        'filter_pressure_drop': 4300,
        'permeability': 60.0,
        'quantitative': 28.0,
        'citrate': 0.015,
    }
    return {**params, **true_yields(params)}


@pytest.fixture
def linear_coefficients() -> Dict[str, LinearCoefficients]:
    """Ground-truth coefficient sets keyed by response."""
    return {
        response: LinearCoefficients(
            response=response,
            intercept=intercept,
            weights=np.array(weights)
        )
        for response, (intercept, weights) in TRUE_MODELS.items()
    }


# API fixtures
@pytest.fixture
def test_settings() -> Settings:
    """Settings with seeding disabled and a small search ceiling."""
    return Settings(
        seed_default_samples=False,
        max_search_candidates=50_000,
        search_chunk_size=1_000
    )


@pytest.fixture
def client(database, test_settings) -> Iterator[TestClient]:
    """Test client bound to the in-memory database."""
    def override_get_db():
        session = database.session()
        try:
            yield session
        finally:
            session.close()

    app.state.database = database
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fitted_group(client, synthetic_samples) -> str:
    """Group 'synthetic' imported and fitted once through the API."""
    response = client.post(
        "/api/samples/import",
        json={'group_name': 'synthetic', 'samples': synthetic_samples}
    )
    assert response.status_code == 201
    response = client.post("/api/coefficients/synthetic/fit")
    assert response.status_code == 201
    return 'synthetic'
