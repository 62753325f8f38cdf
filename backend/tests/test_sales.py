# Overview: Pytest coverage for sale recording and stock movement.

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import create_product
from pshop.models import Product, Sale
from pshop.schemas import SaleInput
from pshop.services import sales_service


def post_sale(client, headers, **payload):
    return client.post('/api/data?resource=sales', json=payload, headers=headers)


def get_stock(client, headers, product_id):
    response = client.get(f'/api/data?resource=products&id={product_id}', headers=headers)
    return response.json['data']['stock']


class TestRecordSale:
    def test_sale_decrements_stock(self, client, user_a):
        product = create_product(client, user_a['headers'], stock=5)

        response = post_sale(
            client, user_a['headers'],
            productId=product['id'], productName='Desk Lamp', quantity=2, unitPrice=25,
        )

        assert response.status_code == 200
        sale = response.json['data']['sale']
        assert response.json['data']['id'] == sale['id']
        assert sale['total'] == 50
        assert sale['profit'] == 30
        assert sale['productId'] == product['id']
        assert get_stock(client, user_a['headers'], product['id']) == 3

    def test_oversell_clamps_stock_at_zero(self, client, user_a):
        product = create_product(client, user_a['headers'], stock=1)

        response = post_sale(client, user_a['headers'], productId=product['id'], quantity=4, unitPrice=25)

        assert response.status_code == 200
        assert response.json['data']['sale']['productName'] == 'Desk Lamp'
        assert get_stock(client, user_a['headers'], product['id']) == 0

    def test_client_profit_is_ignored_when_product_known(self, client, user_a):
        product = create_product(client, user_a['headers'], partnerPrice=10)

        sale = post_sale(
            client, user_a['headers'],
            productId=product['id'], quantity=1, unitPrice=15, total=999, profit=999,
        ).json['data']['sale']

        assert sale['total'] == 15
        assert sale['profit'] == 5

    def test_unit_price_derived_from_total(self, client, user_a):
        sale = post_sale(
            client, user_a['headers'], productName='Cable', quantity=4, total=10, profit=2,
        ).json['data']['sale']

        assert sale['unitPrice'] == 2.5
        assert sale['total'] == 10
        assert sale['profit'] == 2
        assert sale['productId'] is None

    def test_total_that_does_not_divide_evenly_is_kept(self, client, user_a):
        sale = post_sale(
            client, user_a['headers'], productName='Cable', quantity=3, total=100, profit=40,
        ).json['data']['sale']

        assert sale['total'] == 100
        assert sale['unitPrice'] == 33.33
        assert sale['profit'] == 40

        stats = client.get('/api/data?resource=stats', headers=user_a['headers']).json['data']
        assert stats['totalRevenue'] == 100
        assert stats['last7Days'][-1]['salesRevenue'] == 100

    def test_unknown_product_is_recorded_without_link(self, client, user_a):
        response = post_sale(
            client, user_a['headers'],
            productId='product-gone', productName='Old Lamp', quantity=1, unitPrice=5, profit=1,
        )

        assert response.status_code == 200
        sale = response.json['data']['sale']
        assert sale['productId'] is None
        assert sale['productName'] == 'Old Lamp'
        assert sale['profit'] == 1

    def test_unknown_product_needs_a_name(self, client, user_a):
        response = post_sale(client, user_a['headers'], productId='product-gone', quantity=1, unitPrice=5)

        assert response.status_code == 400
        assert response.json['error'] == 'validation'
        assert client.get('/api/data?resource=sales', headers=user_a['headers']).json['data'] == []

    def test_sale_survives_product_deletion(self, client, user_a):
        product = create_product(client, user_a['headers'])
        post_sale(client, user_a['headers'], productId=product['id'], quantity=1, unitPrice=25)
        client.delete(f"/api/data?resource=products&id={product['id']}", headers=user_a['headers'])

        sales = client.get('/api/data?resource=sales', headers=user_a['headers']).json['data']
        assert len(sales) == 1
        assert sales[0]['productName'] == 'Desk Lamp'

    def test_sale_date_defaults_to_now_and_accepts_iso(self, client, user_a):
        sale = post_sale(
            client, user_a['headers'], productName='Cable', quantity=1, unitPrice=3,
            saleDate='2026-03-04T10:00:00+02:00',
        ).json['data']['sale']
        assert sale['saleDate'] == '2026-03-04T08:00:00Z'

    def test_sales_listed_newest_first(self, client, user_a):
        post_sale(client, user_a['headers'], productName='Old', quantity=1, unitPrice=1, saleDate='2026-01-01')
        post_sale(client, user_a['headers'], productName='New', quantity=1, unitPrice=1, saleDate='2026-02-01')

        sales = client.get('/api/data?resource=sales', headers=user_a['headers']).json['data']
        assert [s['productName'] for s in sales] == ['New', 'Old']


class TestSaleValidation:
    def test_zero_quantity(self, client, user_a):
        response = post_sale(client, user_a['headers'], productName='Cable', quantity=0, unitPrice=1)
        assert response.status_code == 400

    def test_fractional_quantity(self, client, user_a):
        response = post_sale(client, user_a['headers'], productName='Cable', quantity=1.5, unitPrice=1)
        assert response.status_code == 400

    def test_product_name_required_without_product(self, client, user_a):
        response = post_sale(client, user_a['headers'], quantity=1, unitPrice=1)
        assert response.status_code == 400
        assert response.json['error'] == 'validation'

    def test_bad_sale_date(self, client, user_a):
        response = post_sale(client, user_a['headers'], productName='Cable', quantity=1, saleDate='yesterday')
        assert response.status_code == 400

    def test_sales_cannot_be_deleted(self, client, user_a):
        response = client.delete('/api/data?resource=sales&id=sale-1', headers=user_a['headers'])
        assert response.status_code == 400
        assert response.json['message'] == 'Invalid resource'


@pytest.fixture
def failing_stock_update(monkeypatch):
    """Make the UPDATE of products fail after the pending sale row is flushed."""
    real_execute = Session.execute

    def execute(self, statement, *args, **kwargs):
        if getattr(statement, 'is_update', False) and statement.table.name == 'products':
            self.flush()
            raise OperationalError('UPDATE products', {}, Exception('database is locked'))
        return real_execute(self, statement, *args, **kwargs)

    monkeypatch.setattr(Session, 'execute', execute)
    return monkeypatch


class TestSaleAtomicity:
    """The sale row and the stock decrement commit together or not at all."""

    def test_failed_stock_update_leaves_no_sale(self, client, user_a, db_session, failing_stock_update):
        product = create_product(client, user_a['headers'], stock=5)
        data = SaleInput.from_payload({'productId': product['id'], 'quantity': 2, 'unitPrice': 25})

        with pytest.raises(OperationalError):
            sales_service.create_sale(user_a['user']['id'], data)
        failing_stock_update.undo()

        assert db_session.query(Sale).count() == 0
        assert db_session.get(Product, product['id']).stock == 5

    def test_failed_stock_update_answers_internal_error(self, client, user_a, db_session, failing_stock_update):
        product = create_product(client, user_a['headers'], stock=5)

        response = post_sale(client, user_a['headers'], productId=product['id'], quantity=2, unitPrice=25)
        failing_stock_update.undo()

        assert response.status_code == 500
        assert response.json['error'] == 'internal'
        assert client.get('/api/data?resource=sales', headers=user_a['headers']).json['data'] == []
        assert get_stock(client, user_a['headers'], product['id']) == 5
