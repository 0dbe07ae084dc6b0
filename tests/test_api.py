from __future__ import annotations

import unittest

from fastapi.testclient import TestClient

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.main import app
from paintops.models import UserRole
from paintops.services.user_service import hash_password
from tests.support import add_user, make_session_factory


class ApiTestCase(unittest.TestCase):
    authenticate = True

    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        with self.session_factory() as db:
            self.user_id = add_user(db, username='admin', password_hash=hash_password('s3cret')).id
            db.commit()

        def _get_db():
            with self.session_factory() as db:
                yield db

        app.dependency_overrides[get_db] = _get_db
        if self.authenticate:
            app.dependency_overrides[get_current_principal] = lambda: Principal(
                id=self.user_id, username='admin', name='Admin', role=UserRole.SUPERADMIN, active=True
            )
        self.client = TestClient(app, raise_server_exceptions=False)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()


class AuthApiTests(ApiTestCase):
    authenticate = False

    def test_protected_route_requires_session(self) -> None:
        response = self.client.get('/api/clients')
        self.assertEqual(response.status_code, 401)

    def test_login_sets_cookie_and_logout_revokes_it(self) -> None:
        response = self.client.post('/api/login', json={'username': 'admin', 'password': 's3cret'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['username'], 'admin')

        me = self.client.get('/api/user')
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()['role'], 'superadmin')

        self.assertEqual(self.client.post('/api/logout').status_code, 204)
        self.assertEqual(self.client.get('/api/user').status_code, 401)

    def test_bad_password_is_rejected(self) -> None:
        response = self.client.post('/api/login', json={'username': 'admin', 'password': 'nope'})
        self.assertEqual(response.status_code, 401)


class WorkflowApiTests(ApiTestCase):
    def _create_project(self) -> tuple[int, int]:
        client = self.client.post(
            '/api/clients',
            json={'name': 'Birch Lane', 'email': 'b@lane.test', 'phone': '555-0101', 'address': '9 Birch Ln'},
        )
        self.assertEqual(client.status_code, 201)
        project = self.client.post('/api/projects', json={'client_id': client.json()['id'], 'title': 'Exterior'})
        self.assertEqual(project.status_code, 201)
        return client.json()['id'], project.json()['id']

    def test_quote_approval_updates_project(self) -> None:
        _, project_id = self._create_project()
        quote = self.client.post('/api/quotes', json={'project_id': project_id, 'total_estimate': '150.00'})
        self.assertEqual(quote.status_code, 201)

        approved = self.client.put(f'/api/quotes/{quote.json()["id"]}', json={'status': 'approved'})
        self.assertEqual(approved.status_code, 200)
        self.assertEqual(approved.json()['status'], 'approved')
        self.assertEqual(self.client.get(f'/api/projects/{project_id}').json()['status'], 'approved')

        activities = self.client.get('/api/activities', params={'project_id': project_id}).json()
        self.assertEqual(activities[0]['type'], 'quote_approved')

    def test_quote_accepts_patch(self) -> None:
        _, project_id = self._create_project()
        quote = self.client.post('/api/quotes', json={'project_id': project_id, 'notes': 'Satin finish'}).json()

        sent = self.client.patch(f'/api/quotes/{quote["id"]}', json={'status': 'sent'})
        self.assertEqual(sent.status_code, 200)
        self.assertEqual(sent.json()['status'], 'sent')
        self.assertEqual(sent.json()['notes'], 'Satin finish')
        self.assertEqual(self.client.get(f'/api/projects/{project_id}').json()['status'], 'quoted')

    def test_service_order_lifecycle(self) -> None:
        _, project_id = self._create_project()
        created = self.client.post(
            '/api/service-orders',
            json={'project_id': project_id, 'details': 'Pressure wash and prime', 'assigned_staff': [1]},
        )
        self.assertEqual(created.status_code, 201)
        order_id = created.json()['id']
        self.assertEqual(created.json()['status'], 'pending')

        started = self.client.patch(f'/api/service-orders/{order_id}', json={'status': 'in_progress'})
        self.assertEqual(started.status_code, 200)
        self.assertIsNotNone(started.json()['started_date'])

        listed = self.client.get('/api/service-orders', params={'project_id': project_id, 'status': 'in_progress'})
        self.assertEqual([order['id'] for order in listed.json()], [order_id])

        bad = self.client.put(f'/api/service-orders/{order_id}', json={'status': 'finished'})
        self.assertEqual(bad.status_code, 400)

        activities = self.client.get('/api/activities', params={'project_id': project_id}).json()
        self.assertEqual(activities[0]['type'], 'service_order_started')

        self.assertEqual(self.client.delete(f'/api/service-orders/{order_id}').status_code, 204)
        self.assertEqual(self.client.get(f'/api/service-orders/{order_id}').status_code, 404)

    def test_invoice_list_filters_combine(self) -> None:
        client_id, _ = self._create_project()
        other = self.client.post(
            '/api/clients',
            json={'name': 'Cedar Row', 'email': 'c@row.test', 'phone': '555-0102', 'address': '3 Cedar Row'},
        ).json()
        mine = self.client.post('/api/invoices', json={'client_id': client_id}).json()
        self.client.post('/api/invoices', json={'client_id': other['id']})

        listed = self.client.get('/api/invoices', params={'status': 'draft', 'client_id': client_id})
        self.assertEqual([invoice['id'] for invoice in listed.json()], [mine['id']])

    def test_invoice_from_quote_endpoint(self) -> None:
        _, project_id = self._create_project()
        quote = self.client.post('/api/quotes', json={'project_id': project_id, 'total_estimate': '150.00'}).json()

        response = self.client.post(f'/api/invoices/from-quote/{quote["id"]}', json={'locale': 'en'})
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['items'][0]['description'], 'Painting service')
        self.assertEqual(body['total_amount'], '150.00')

    def test_materialize_requires_confirmation_over_existing_items(self) -> None:
        _, project_id = self._create_project()
        quote = self.client.post('/api/quotes', json={'project_id': project_id}).json()
        payload = {'existing_items': [{'description': 'Custom', 'unit_price': '10'}]}

        blocked = self.client.post(f'/api/quotes/{quote["id"]}/materialize', json=payload)
        self.assertEqual(blocked.status_code, 409)
        self.assertEqual(blocked.json()['existing_count'], 1)

        allowed = self.client.post(f'/api/quotes/{quote["id"]}/materialize', json={**payload, 'confirm_overwrite': True})
        self.assertEqual(allowed.status_code, 200)
        self.assertTrue(allowed.json()['used_fallback'])

    def test_totals_preview(self) -> None:
        response = self.client.post(
            '/api/totals/preview',
            json={
                'items': [
                    {'quantity': 25, 'unit_price': 2, 'discount': 0},
                    {'quantity': 5, 'unit_price': 10, 'discount': 5},
                ],
                'discount': 10,
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['subtotal'], '95.00')
        self.assertEqual(response.json()['total'], '85.00')

    def test_unknown_record_is_404(self) -> None:
        response = self.client.get('/api/quotes/9999')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'message': 'Quote not found'})

    def test_invalid_payload_is_400_with_field_errors(self) -> None:
        response = self.client.post('/api/clients', json={'name': 'No contact'})
        self.assertEqual(response.status_code, 400)
        fields = {error['field'] for error in response.json()['errors']}
        self.assertIn('email', fields)

    def test_business_rule_violation_is_400(self) -> None:
        client_id, _ = self._create_project()
        response = self.client.delete(f'/api/clients/{client_id}')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'][0]['field'], 'client_id')

    def test_payment_endpoint_marks_order_paid(self) -> None:
        supplier = self.client.post('/api/suppliers', json={'name': 'Paint Depot', 'phone': '555-0199'}).json()
        order = self.client.post(
            '/api/purchase-orders',
            json={'supplier_id': supplier['id'], 'items': [{'description': 'Primer', 'quantity': 2, 'price': 40}]},
        ).json()
        self.assertEqual(order['total_amount'], '80.00')

        payment = self.client.post(
            '/api/payments',
            json={
                'recipient_type': 'supplier',
                'recipient_id': supplier['id'],
                'amount': '80.00',
                'method': 'zelle',
                'purchase_order_id': order['id'],
            },
        )
        self.assertEqual(payment.status_code, 201)
        self.assertEqual(self.client.get(f'/api/purchase-orders/{order["id"]}').json()['status'], 'paid')


if __name__ == '__main__':
    unittest.main()
