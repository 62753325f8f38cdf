# Overview: Pytest coverage for tenant isolation behavior.

"""
Multi-Tenant Isolation Tests

SECURITY TESTS: Prove that one user can never see or change another
user's rows. A foreign id behaves exactly like a missing one (404), so
the response does not reveal that the row exists.
"""

import pytest

from conftest import create_product, product_payload
from pshop.errors import NotFoundError
from pshop.models import Product
from pshop.services.tenant_service import require_owned, scoped_query


class TestTenantServiceHelpers:
    def test_scoped_query_only_returns_own_rows(self, client, user_a, user_b, db_session):
        create_product(client, user_a['headers'], name='A1')
        create_product(client, user_b['headers'], name='B1')

        names = [p.name for p in scoped_query(Product, user_a['user']['id']).all()]
        assert names == ['A1']

    def test_require_owned_cross_tenant(self, client, user_a, user_b):
        product = create_product(client, user_b['headers'])

        with pytest.raises(NotFoundError):
            require_owned(Product, product['id'], user_a['user']['id'], label='Product')


class TestCrossTenantRoutes:
    def test_listings_are_scoped(self, client, user_a, user_b):
        create_product(client, user_a['headers'])
        client.post('/api/data?resource=sales', json={'productName': 'x', 'quantity': 1, 'unitPrice': 1},
                    headers=user_a['headers'])
        client.post('/api/data?resource=expenses', json={'amount': 1, 'category': 'x'}, headers=user_a['headers'])

        for resource in ('products', 'sales', 'expenses'):
            response = client.get(f'/api/data?resource={resource}', headers=user_b['headers'])
            assert response.json['data'] == [], resource

    def test_foreign_product_read_update_delete(self, client, user_a, user_b):
        product = create_product(client, user_a['headers'])
        url = f"/api/data?resource=products&id={product['id']}"

        assert client.get(url, headers=user_b['headers']).status_code == 404
        assert client.put(url, json=product_payload(name='Hijacked'), headers=user_b['headers']).status_code == 404
        assert client.delete(url, headers=user_b['headers']).status_code == 404

        still_there = client.get(url, headers=user_a['headers']).json['data']
        assert still_there['name'] == 'Desk Lamp'

    def test_foreign_put_is_404_even_with_invalid_body(self, client, user_a, user_b):
        product = create_product(client, user_a['headers'])

        response = client.put(
            f"/api/data?resource=products&id={product['id']}", json={'bogus': True}, headers=user_b['headers']
        )
        assert response.status_code == 404

    def test_foreign_expense_delete(self, client, user_a, user_b):
        expense = client.post(
            '/api/data?resource=expenses', json={'amount': 3, 'category': 'Fees'}, headers=user_a['headers']
        ).json['data']['expense']

        response = client.delete(f"/api/data?resource=expenses&id={expense['id']}", headers=user_b['headers'])

        assert response.status_code == 404
        assert len(client.get('/api/data?resource=expenses', headers=user_a['headers']).json['data']) == 1

    def test_sale_cannot_move_foreign_stock(self, client, user_a, user_b):
        product = create_product(client, user_a['headers'], stock=5)

        response = client.post(
            '/api/data?resource=sales',
            json={'productId': product['id'], 'productName': 'Lamp', 'quantity': 3, 'unitPrice': 1},
            headers=user_b['headers'],
        )

        assert response.status_code == 200
        assert response.json['data']['sale']['productId'] is None
        stock = client.get(f"/api/data?resource=products&id={product['id']}", headers=user_a['headers'])
        assert stock.json['data']['stock'] == 5

    def test_themes_are_per_user(self, client, user_a, user_b):
        client.post('/api/data?resource=theme', json={'colors': {'primary': '#000'}, 'mode': 'dark'},
                    headers=user_a['headers'])

        assert client.get('/api/data?resource=theme', headers=user_b['headers']).json.get('data') is None

    def test_data_requires_session(self, client, db_session):
        response = client.get('/api/data?resource=products')

        assert response.status_code == 401
        assert response.json['error'] == 'unauthenticated'
