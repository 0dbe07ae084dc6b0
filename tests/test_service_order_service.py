from __future__ import annotations

import unittest
from datetime import date

from sqlalchemy import select

from paintops.errors import NotFoundError, ValidationFailed
from paintops.models import Activity, Project, ProjectStatus, ServiceOrder, ServiceOrderStatus
from paintops.services import project_service, service_order_service
from tests.support import add_client, add_project, add_user, make_session_factory


class ServiceOrderServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.user = add_user(self.db)
        self.client_row = add_client(self.db)
        self.project = add_project(self.db, self.client_row, title='Lobby')

    def tearDown(self) -> None:
        self.db.close()

    def _activities(self) -> list[Activity]:
        return list(self.db.execute(select(Activity).order_by(Activity.id.asc())).scalars().all())

    def _create(self, **fields) -> ServiceOrder:
        fields.setdefault('project_id', self.project.id)
        fields.setdefault('details', 'Two coats on the lobby walls')
        return service_order_service.create_service_order(self.db, user_id=self.user.id, fields=fields)

    def test_create_logs_against_project_and_client(self) -> None:
        order = self._create(assigned_staff=[3, 4], start_date=date(2024, 6, 3))
        self.assertEqual(order.status, ServiceOrderStatus.PENDING)
        self.assertEqual(order.assigned_staff, [3, 4])
        activities = self._activities()
        self.assertEqual([a.type for a in activities], ['service_order_created'])
        self.assertEqual(activities[0].description, 'New service order created for project "Lobby"')
        self.assertEqual(activities[0].project_id, self.project.id)
        self.assertEqual(activities[0].client_id, self.client_row.id)

    def test_unknown_project_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self._create(project_id=999)
        self.assertEqual(self._activities(), [])

    def test_end_before_start_is_rejected(self) -> None:
        with self.assertRaises(ValidationFailed) as ctx:
            self._create(start_date=date(2024, 6, 10), end_date=date(2024, 6, 1))
        self.assertEqual(ctx.exception.errors[0]['field'], 'end_date')

    def test_status_changes_stamp_dates_and_log_transitions(self) -> None:
        order = self._create()
        service_order_service.set_service_order_status(
            self.db, service_order_id=order.id, user_id=self.user.id, status='in_progress'
        )
        self.assertIsNotNone(order.started_date)
        service_order_service.set_service_order_status(
            self.db, service_order_id=order.id, user_id=self.user.id, status=ServiceOrderStatus.COMPLETED
        )
        self.assertEqual(order.status, ServiceOrderStatus.COMPLETED)
        self.assertIsNotNone(order.completed_date)

        activities = self._activities()
        self.assertEqual(
            [a.type for a in activities],
            ['service_order_created', 'service_order_started', 'service_order_completed'],
        )
        self.assertEqual(activities[-1].description, 'Service order for project "Lobby" has been completed')
        self.assertEqual(self.db.get(Project, self.project.id).status, ProjectStatus.PENDING)

    def test_created_in_progress_runs_the_transition(self) -> None:
        order = self._create(status=ServiceOrderStatus.IN_PROGRESS)
        self.assertEqual(order.status, ServiceOrderStatus.IN_PROGRESS)
        self.assertEqual([a.type for a in self._activities()], ['service_order_created', 'service_order_started'])

    def test_field_update_logs_service_order_updated(self) -> None:
        order = self._create()
        service_order_service.update_service_order(
            self.db, service_order_id=order.id, user_id=self.user.id, changes={'after_images': ['after-1.jpg']}
        )
        self.assertEqual(order.after_images, ['after-1.jpg'])
        self.assertEqual([a.type for a in self._activities()], ['service_order_created', 'service_order_updated'])

    def test_update_checks_schedule_against_stored_dates(self) -> None:
        order = self._create(start_date=date(2024, 6, 10))
        with self.assertRaises(ValidationFailed):
            service_order_service.update_service_order(
                self.db, service_order_id=order.id, user_id=self.user.id, changes={'end_date': date(2024, 6, 9)}
            )

    def test_unknown_status_is_rejected(self) -> None:
        order = self._create()
        with self.assertRaises(ValidationFailed):
            service_order_service.set_service_order_status(
                self.db, service_order_id=order.id, user_id=self.user.id, status='archived'
            )
        self.assertEqual(order.status, ServiceOrderStatus.PENDING)

    def test_signature_is_dated_when_captured(self) -> None:
        order = self._create()
        self.assertIsNone(order.signature_date)
        service_order_service.update_service_order(
            self.db, service_order_id=order.id, user_id=self.user.id, changes={'client_signature': 'J. Rivera'}
        )
        self.assertIsNotNone(order.signature_date)

    def test_list_filters_combine(self) -> None:
        other_project = add_project(self.db, self.client_row, title='Stairwell')
        mine = self._create(status=ServiceOrderStatus.COMPLETED)
        self._create()
        self._create(project_id=other_project.id, status=ServiceOrderStatus.COMPLETED)

        orders = service_order_service.list_service_orders(
            self.db, status=ServiceOrderStatus.COMPLETED, project_id=self.project.id
        )
        self.assertEqual([order.id for order in orders], [mine.id])

    def test_delete_logs_and_project_delete_cascades(self) -> None:
        first = self._create()
        self._create()
        service_order_service.delete_service_order(self.db, service_order_id=first.id, user_id=self.user.id)
        self.assertIsNone(self.db.get(ServiceOrder, first.id))
        self.assertEqual(self._activities()[-1].type, 'service_order_deleted')

        project_service.delete_project(self.db, project_id=self.project.id, user_id=self.user.id)
        self.assertEqual(self.db.execute(select(ServiceOrder)).scalars().all(), [])


if __name__ == '__main__':
    unittest.main()
