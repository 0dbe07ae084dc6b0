from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from paintops.errors import ValidationFailed
from paintops.models import Activity, ClientType, ProjectStatus, Quote, User, UserRole, WebSession
from paintops.security.sessions import create_web_session, load_user_from_token, revoke_web_session
from paintops.services import client_service, personnel_service, project_service
from paintops.services.user_service import authenticate_user, ensure_default_admin, hash_password
from tests.support import add_client, add_project, add_quote, add_user, make_session_factory


class ClientProjectServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.user = add_user(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def _types(self) -> list[str]:
        return list(self.db.execute(select(Activity.type).order_by(Activity.id.asc())).scalars().all())

    def test_create_client_strips_input_and_logs(self) -> None:
        client = client_service.create_client(
            self.db,
            user_id=self.user.id,
            name='  Oak Street Dental ',
            email='front@oak.test',
            phone='555-0110',
            address='12 Oak St',
            notes='   ',
        )
        self.assertEqual(client.name, 'Oak Street Dental')
        self.assertIsNone(client.notes)
        self.assertEqual(self._types(), ['client_created'])

    def test_convert_client_only_changes_type(self) -> None:
        client = add_client(self.db)
        client_service.convert_client(self.db, client_id=client.id, user_id=self.user.id, client_type=ClientType.PROSPECT)
        self.assertEqual(client.type, ClientType.PROSPECT)
        self.assertEqual(client.name, 'Acme Homes')
        self.assertEqual(self._types(), ['client_converted'])

    def test_required_fields_cannot_be_cleared(self) -> None:
        client = add_client(self.db)
        with self.assertRaises(ValidationFailed) as ctx:
            client_service.update_client(self.db, client_id=client.id, user_id=self.user.id, changes={'email': None})
        self.assertEqual(ctx.exception.errors, [{'field': 'email', 'message': 'Field is required'}])

    def test_client_with_projects_cannot_be_deleted(self) -> None:
        client = add_client(self.db)
        add_project(self.db, client)
        with self.assertRaises(ValidationFailed):
            client_service.delete_client(self.db, client_id=client.id, user_id=self.user.id)

    def test_deleting_project_removes_its_quotes(self) -> None:
        client = add_client(self.db)
        project = add_project(self.db, client, title='Garage')
        add_quote(self.db, project)
        project_service.delete_project(self.db, project_id=project.id, user_id=self.user.id)
        self.assertEqual(self.db.execute(select(Quote)).scalars().all(), [])
        self.assertEqual(self._types(), ['project_deleted'])

    def test_project_list_filters_combine(self) -> None:
        client = add_client(self.db)
        other = add_client(self.db, name='Birch Lane')
        mine = add_project(self.db, client, title='Garage')
        add_project(self.db, other, title='Fence')
        projects = project_service.list_projects(self.db, status=ProjectStatus.PENDING, client_id=client.id)
        self.assertEqual([project.id for project in projects], [mine.id])


class PersonnelServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.user = add_user(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def test_each_kind_logs_its_own_activity_types(self) -> None:
        staff = personnel_service.create_person(
            self.db, personnel_service.STAFF, user_id=self.user.id, fields={'name': 'Rosa', 'role': 'Lead', 'phone': '1'}
        )
        personnel_service.update_person(
            self.db, personnel_service.STAFF, record_id=staff.id, user_id=self.user.id, changes={'role': 'Foreman'}
        )
        sub = personnel_service.create_person(
            self.db, personnel_service.SUBCONTRACTOR, user_id=self.user.id, fields={'name': 'Drywall Co', 'phone': '2'}
        )
        personnel_service.delete_person(self.db, personnel_service.SUBCONTRACTOR, record_id=sub.id, user_id=self.user.id)

        types = self.db.execute(select(Activity.type).order_by(Activity.id.asc())).scalars().all()
        self.assertEqual(types, ['staff_created', 'staff_updated', 'subcontractor_created', 'subcontractor_deleted'])
        self.assertEqual(staff.role, 'Foreman')


class UserAndSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()

    def tearDown(self) -> None:
        self.db.close()

    def test_default_admin_is_created_once(self) -> None:
        first = ensure_default_admin(self.db, username='admin', password='pw-123', name='Administrator')
        second = ensure_default_admin(self.db, username='other', password='pw-456', name='Other')
        self.assertIsNotNone(first)
        self.assertEqual(first.role, UserRole.SUPERADMIN)
        self.assertIsNone(second)
        self.assertEqual(len(self.db.execute(select(User)).scalars().all()), 1)

    def test_authenticate_checks_password_and_active_flag(self) -> None:
        user = add_user(self.db, username='painter', password_hash=hash_password('brush'))
        self.assertEqual(authenticate_user(self.db, username='painter', password='brush').id, user.id)
        self.assertIsNone(authenticate_user(self.db, username='painter', password='roller'))
        user.active = False
        self.assertIsNone(authenticate_user(self.db, username='painter', password='brush'))

    def test_session_token_round_trip_and_revocation(self) -> None:
        user = add_user(self.db)
        token = create_web_session(self.db, user.id, 'pytest')
        self.assertEqual(load_user_from_token(self.db, token).id, user.id)

        revoke_web_session(self.db, token)
        self.assertIsNone(load_user_from_token(self.db, token))

    def test_expired_session_is_ignored(self) -> None:
        user = add_user(self.db)
        token = create_web_session(self.db, user.id, None)
        web_session = self.db.execute(select(WebSession).where(WebSession.session_token == token)).scalar_one()
        web_session.expires_at = datetime.now(tz=timezone.utc) - timedelta(minutes=1)
        self.db.commit()
        self.assertIsNone(load_user_from_token(self.db, token))

    def test_missing_token_is_anonymous(self) -> None:
        self.assertIsNone(load_user_from_token(self.db, None))
        self.assertIsNone(load_user_from_token(self.db, 'not-a-token'))


if __name__ == '__main__':
    unittest.main()
