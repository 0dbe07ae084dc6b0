from __future__ import annotations

import unittest
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from paintops.errors import NotFoundError, ValidationFailed
from paintops.models import Activity, Project, ProjectStatus, Quote, QuoteStatus
from paintops.services import quote_service
from paintops.services.project_service import latest_quote_for_project
from paintops.services.status_workflow import QUOTE_WORKFLOW, apply_transition
from tests.support import add_client, add_project, add_quote, add_user, make_session_factory


class QuoteStatusWorkflowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.user = add_user(self.db)
        self.client_row = add_client(self.db)
        self.project = add_project(self.db, self.client_row, title='Porch')
        self.quote = add_quote(self.db, self.project, total_estimate=Decimal('500'))

    def tearDown(self) -> None:
        self.db.close()

    def _activities(self) -> list[Activity]:
        return list(self.db.execute(select(Activity).order_by(Activity.id.asc())).scalars().all())

    def test_approving_quote_approves_project_and_logs_once(self) -> None:
        quote_service.set_quote_status(self.db, quote_id=self.quote.id, user_id=self.user.id, status='approved')
        self.db.commit()

        self.assertEqual(self.db.get(Quote, self.quote.id).status, QuoteStatus.APPROVED)
        self.assertEqual(self.db.get(Project, self.project.id).status, ProjectStatus.APPROVED)
        self.assertIsNotNone(self.quote.approved_date)
        activities = self._activities()
        self.assertEqual([a.type for a in activities], ['quote_approved'])
        self.assertEqual(activities[0].description, 'Quote for project "Porch" has been approved')
        self.assertEqual(activities[0].client_id, self.client_row.id)

    def test_rejecting_quote_leaves_project_untouched(self) -> None:
        quote_service.set_quote_status(self.db, quote_id=self.quote.id, user_id=self.user.id, status='rejected')
        self.db.commit()

        self.assertEqual(self.db.get(Project, self.project.id).status, ProjectStatus.PENDING)
        self.assertEqual([a.type for a in self._activities()], ['quote_rejected'])

    def test_sending_quote_marks_project_quoted(self) -> None:
        quote_service.set_quote_status(self.db, quote_id=self.quote.id, user_id=self.user.id, status=QuoteStatus.SENT)
        self.assertEqual(self.db.get(Project, self.project.id).status, ProjectStatus.QUOTED)
        self.assertEqual([a.type for a in self._activities()], ['quote_sent'])

    def test_field_only_update_logs_quote_updated(self) -> None:
        quote_service.update_quote(self.db, quote_id=self.quote.id, user_id=self.user.id, changes={'notes': 'Two coats'})
        self.assertEqual(self.quote.notes, 'Two coats')
        self.assertEqual(self.quote.status, QuoteStatus.DRAFT)
        activities = self._activities()
        self.assertEqual([a.type for a in activities], ['quote_updated'])
        self.assertEqual(activities[0].description, 'Quote updated for project "Porch"')

    def test_sent_quote_can_move_back_to_draft(self) -> None:
        quote_service.set_quote_status(self.db, quote_id=self.quote.id, user_id=self.user.id, status='sent')
        quote_service.set_quote_status(self.db, quote_id=self.quote.id, user_id=self.user.id, status='draft')
        self.assertEqual(self.quote.status, QuoteStatus.DRAFT)
        self.assertEqual([a.type for a in self._activities()], ['quote_sent', 'quote_updated'])

    def test_unknown_status_is_rejected(self) -> None:
        with self.assertRaises(ValidationFailed) as ctx:
            quote_service.set_quote_status(self.db, quote_id=self.quote.id, user_id=self.user.id, status='shipped')
        self.assertEqual(ctx.exception.errors[0]['field'], 'status')
        self.assertEqual(self._activities(), [])

    def test_missing_quote_raises_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            quote_service.set_quote_status(self.db, quote_id=9999, user_id=self.user.id, status='approved')

    def test_missing_project_falls_back_to_unknown_label(self) -> None:
        orphan = Quote(project_id=424242, status=QuoteStatus.DRAFT, total_estimate=Decimal('0'))
        outcome = apply_transition(
            self.db,
            workflow=QUOTE_WORKFLOW,
            document=orphan,
            requested_status='approved',
            user_id=self.user.id,
            project_id=424242,
            client_id=None,
            labels={'project': None},
        )
        self.assertEqual(orphan.status, QuoteStatus.APPROVED)
        self.assertFalse(outcome.project_updated)
        self.assertEqual(outcome.activity.description, 'Quote for project "Unknown" has been approved')

    def test_activity_failure_does_not_undo_status_change(self) -> None:
        with patch('paintops.services.activity_service.Activity', side_effect=SQLAlchemyError('disk full')):
            with self.assertLogs('paintops.services.activity_service', level='ERROR'):
                quote_service.set_quote_status(self.db, quote_id=self.quote.id, user_id=self.user.id, status='approved')
        self.db.commit()

        self.assertEqual(self.db.get(Quote, self.quote.id).status, QuoteStatus.APPROVED)
        self.assertEqual(self.db.get(Project, self.project.id).status, ProjectStatus.APPROVED)
        self.assertEqual(self._activities(), [])


class QuoteCreationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.user = add_user(self.db)
        client = add_client(self.db)
        self.project = add_project(self.db, client, images=['front.jpg'], documents=['scope.pdf'])

    def tearDown(self) -> None:
        self.db.close()

    def test_new_quote_inherits_project_attachments(self) -> None:
        quote = quote_service.create_quote(self.db, user_id=self.user.id, project_id=self.project.id)
        self.assertEqual(quote.images, ['front.jpg'])
        self.assertEqual(quote.documents, ['scope.pdf'])
        self.assertIsNotNone(quote.valid_until)

    def test_creating_sent_quote_runs_transition(self) -> None:
        quote_service.create_quote(self.db, user_id=self.user.id, project_id=self.project.id, status='sent')
        types = self.db.execute(select(Activity.type).order_by(Activity.id.asc())).scalars().all()
        self.assertEqual(types, ['quote_created', 'quote_sent'])
        self.assertEqual(self.project.status, ProjectStatus.QUOTED)

    def test_latest_quote_for_project(self) -> None:
        quote_service.create_quote(self.db, user_id=self.user.id, project_id=self.project.id, notes='first')
        second = quote_service.create_quote(self.db, user_id=self.user.id, project_id=self.project.id, notes='second')
        self.assertEqual(latest_quote_for_project(self.db, project_id=self.project.id).id, second.id)


if __name__ == '__main__':
    unittest.main()
