"""
Tests for the sample endpoints.
"""

from fastapi import status


def _sample(code, **overrides):
    data = {
        'code': code,
        'filter_ventilation': '0.409',
        'filter_pressure_drop': 4318,
        'permeability': '71.2',
        'quantitative': '27.8',
        'citrate': '0.022',
        'tar': '6.88',
        'nicotine': '0.59',
        'co': '3.93',
    }
    data.update(overrides)
    return data


class TestSampleEndpoints:
    """Test /api/samples."""

    def test_create_and_get(self, client):
        response = client.post("/api/samples", json=dict(_sample('M06'), group_name='A'))

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data['code'] == 'M06'
        assert data['filter_ventilation'] == '0.409'
        assert data['potassium_ratio'] is None

        response = client.get(f"/api/samples/{data['id']}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()['group_name'] == 'A'

    def test_duplicate_code(self, client):
        client.post("/api/samples", json=dict(_sample('M06'), group_name='A'))
        response = client.post("/api/samples", json=dict(_sample('M06'), group_name='A'))

        assert response.status_code == status.HTTP_409_CONFLICT
        data = response.json()
        assert data['error'] == 'DuplicateCodeError'
        assert data['code'] == 'M06'

    def test_non_finite_rejected(self, client):
        response = client.post("/api/samples", json=dict(_sample('M06', tar='NaN'), group_name='A'))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_get_missing(self, client):
        response = client.get("/api/samples/999")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert 'not found' in response.json()['detail']

    def test_import_all_or_nothing(self, client):
        response = client.post("/api/samples/import", json={
            'group_name': 'A',
            'samples': [_sample('M01'), _sample('M02'), _sample('M01')]
        })

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()['row'] == 3
        assert client.get("/api/samples", params={'group': 'A'}).json() == []

    def test_import_and_list(self, client):
        response = client.post("/api/samples/import", json={
            'group_name': 'A',
            'samples': [_sample('M01'), _sample('M02'), _sample('S0-2')]
        })
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()['imported_count'] == 3

        listed = client.get("/api/samples", params={'group': 'A'}).json()
        assert [s['code'] for s in listed] == ['S0-2', 'M02', 'M01']

        found = client.get("/api/samples", params={'group': 'A', 'code': 'M0'}).json()
        assert sorted(s['code'] for s in found) == ['M01', 'M02']

        assert client.get("/api/samples/groups").json() == ['A']

    def test_delete_sample_and_group(self, client):
        ids = client.post("/api/samples/import", json={
            'group_name': 'A',
            'samples': [_sample('M01'), _sample('M02')]
        }).json()['ids']

        response = client.delete(f"/api/samples/{ids[0]}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = client.delete("/api/samples/groups/A")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'group_name': 'A', 'samples_deleted': 1, 'coefficients_deleted': 0}

        response = client.delete("/api/samples/groups/A")
        assert response.status_code == status.HTTP_404_NOT_FOUND
