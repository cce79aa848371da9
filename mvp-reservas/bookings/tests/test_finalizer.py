from datetime import timedelta
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from bookings import services
from bookings.models import Reservation, ReservationHistory
from bookings.tasks import finalize_expired_reservations_task
from notifications.models import Notification

from .helpers import make_admin, make_resource, make_user

Status = Reservation.Status


class FinalizerTests(TestCase):
    def setUp(self):
        self.user = make_user("ana")
        self.admin = make_admin()
        self.resource = make_resource()
        self.now = timezone.now()

    def reservation(self, start_offset, hours=1, status=Status.ACTIVE, resource=None):
        start = self.now + start_offset
        return Reservation.objects.create(
            user=self.user,
            resource=resource or self.resource,
            starts_at=start,
            ends_at=start + timedelta(hours=hours),
            status=status,
        )

    def test_expired_active_reservation_is_finalized_once(self):
        yesterday = self.reservation(timedelta(days=-1))

        with self.captureOnCommitCallbacks(execute=True):
            metrics = services.finalize_expired_reservations(now=self.now)

        self.assertEqual(metrics["finalized"], 1)
        yesterday.refresh_from_db()
        self.assertEqual(yesterday.status, Status.FINALIZED)
        entry = yesterday.history.get()
        self.assertEqual(entry.action, ReservationHistory.Action.FINALIZED)
        self.assertIsNone(entry.actor)
        recipients = set(
            Notification.objects.filter(category="reserva_finalizada").values_list("user_id", flat=True)
        )
        self.assertEqual(recipients, {self.user.pk, self.admin.pk})

        with self.captureOnCommitCallbacks(execute=True):
            again = services.finalize_expired_reservations(now=self.now)
        self.assertEqual(again["candidates"], 0)
        self.assertEqual(yesterday.history.count(), 1)

    def test_future_running_and_terminal_reservations_are_untouched(self):
        future = self.reservation(timedelta(days=1))
        running = self.reservation(timedelta(minutes=-30))
        cancelled = self.reservation(timedelta(days=-2), status=Status.CANCELLED)

        metrics = services.finalize_expired_reservations(now=self.now)

        self.assertEqual(metrics["finalized"], 0)
        statuses = dict(Reservation.objects.values_list("pk", "status"))
        self.assertEqual(statuses[future.pk], Status.ACTIVE)
        self.assertEqual(statuses[running.pk], Status.ACTIVE)
        self.assertEqual(statuses[cancelled.pk], Status.CANCELLED)

    def test_failure_on_one_record_does_not_stop_the_rest(self):
        broken = self.reservation(timedelta(days=-3))
        healthy = self.reservation(timedelta(days=-2), resource=make_resource("Sala 2"))
        real_finalize = services.finalize_reservation

        def flaky(reservation_id, **kwargs):
            if reservation_id == broken.pk:
                raise RuntimeError("fila bloqueada")
            return real_finalize(reservation_id, **kwargs)

        with patch("bookings.services.finalize_reservation", side_effect=flaky):
            with self.assertLogs("bookings.services", level="ERROR"):
                metrics = services.finalize_expired_reservations(now=self.now)

        self.assertEqual((metrics["finalized"], metrics["failed"]), (1, 1))
        broken.refresh_from_db()
        healthy.refresh_from_db()
        self.assertEqual(broken.status, Status.ACTIVE)
        self.assertEqual(healthy.status, Status.FINALIZED)

    def test_dry_run_only_counts(self):
        expired = self.reservation(timedelta(days=-1))
        metrics = services.finalize_expired_reservations(now=self.now, dry_run=True)
        self.assertEqual(metrics["candidates"], 1)
        expired.refresh_from_db()
        self.assertEqual(expired.status, Status.ACTIVE)


class FinalizerEntryPointTests(TestCase):
    def setUp(self):
        user = make_user("ana")
        start = timezone.now() - timedelta(days=1)
        self.expired = Reservation.objects.create(
            user=user, resource=make_resource(), starts_at=start, ends_at=start + timedelta(hours=1)
        )

    def test_command_reports_dry_run(self):
        out = StringIO()
        call_command("finalize_reservations", "--dry-run", stdout=out)
        self.assertIn("SIMULACIÓN: 1 reservas vencidas", out.getvalue())
        self.expired.refresh_from_db()
        self.assertEqual(self.expired.status, Status.ACTIVE)

    def test_command_finalizes(self):
        out = StringIO()
        call_command("finalize_reservations", stdout=out)
        self.assertIn("EJECUCIÓN: 1 finalizadas", out.getvalue())
        self.expired.refresh_from_db()
        self.assertEqual(self.expired.status, Status.FINALIZED)

    def test_celery_task_runs_finalizer(self):
        metrics = finalize_expired_reservations_task()
        self.assertEqual(metrics["finalized"], 1)
