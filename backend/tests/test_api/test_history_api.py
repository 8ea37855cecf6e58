"""
Tests for the history endpoints.
"""

import pytest
from fastapi import status


@pytest.fixture
def standard_params(baseline):
    return {name: str(value) for name, value in baseline.items()}


class TestSimulationHistory:
    """Test /api/history/simulations."""

    def test_crud(self, client, standard_params):
        response = client.post("/api/history/simulations", json={
            'group_name': 'A',
            'batch_no': 0,
            'standard_params': standard_params,
            'prediction_params': [dict(standard_params, key='c1')],
            'results': [{'key': 'c1', 'tar': 7.0, 'nicotine': 0.6, 'co': 4.0}]
        })
        assert response.status_code == status.HTTP_201_CREATED
        record = response.json()
        assert record['candidates'][0]['key'] == 'c1'

        listed = client.get("/api/history/simulations").json()
        assert [r['id'] for r in listed] == [record['id']]
        assert client.get("/api/history/simulations", params={'group': 'B'}).json() == []

        response = client.delete(f"/api/history/simulations/{record['id']}")
        assert response.status_code == status.HTTP_204_NO_CONTENT
        response = client.get(f"/api/history/simulations/{record['id']}")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestRecommendationHistory:
    """Test /api/history/recommendations."""

    def test_crud(self, client, standard_params):
        response = client.post("/api/history/recommendations", json={
            'group_name': 'A',
            'recommend_count': 10,
            'standard_params': standard_params,
            'target_params': {
                'tar': '6', 'nicotine': '0.5', 'co': '4',
                'tar_weight': '0.5', 'nicotine_weight': '0.3', 'co_weight': '0.2',
            },
            'design_ranges': {
                name: {'min': '1', 'max': '2', 'step': '1'}
                for name in ('filter_ventilation', 'filter_pressure_drop', 'permeability',
                             'quantitative', 'citrate')
            },
        })
        assert response.status_code == status.HTTP_201_CREATED
        record = response.json()
        assert (record['target_tar'], record['target_nicotine'], record['target_co']) == ('6', '0.5', '4')
        assert record['ranges']['citrate'] == {'min': '1', 'max': '2', 'step': '1'}

        response = client.delete(f"/api/history/recommendations/{record['id']}")
        assert response.status_code == status.HTTP_204_NO_CONTENT
        response = client.delete(f"/api/history/recommendations/{record['id']}")
        assert response.status_code == status.HTTP_404_NOT_FOUND


def test_health(client):
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()['status'] == 'healthy'


def test_root(client):
    response = client.get("/")
    assert response.json()['endpoints']['samples'] == "/api/samples"
