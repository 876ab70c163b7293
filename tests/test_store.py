import unittest
from unittest import mock

from sqlalchemy.exc import IntegrityError, OperationalError

from tests.base import WorkflowTestCase
from workflow_service import store
from workflow_service.errors import Conflict, StoreUnavailable


def transient_error():
    return OperationalError("SELECT 1", {}, Exception("server closed the connection unexpectedly"))


class TestReadRetry(WorkflowTestCase):
    def test_recovers_from_transient_failures(self):
        calls = []

        @store.with_read_retry
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise transient_error()
            return "ok"

        with self.app.app_context():
            self.assertEqual(flaky(), "ok")
        self.assertEqual(len(calls), 3)

    def test_gives_up_after_configured_attempts(self):
        calls = []

        @store.with_read_retry
        def always_down():
            calls.append(1)
            raise transient_error()

        with self.app.app_context():
            with self.assertRaises(StoreUnavailable):
                always_down()
        self.assertEqual(len(calls), self.app.config["STORE_READ_RETRIES"])

    def test_business_errors_are_not_retried(self):
        calls = []

        @store.with_read_retry
        def lookup():
            calls.append(1)
            raise ValueError("bad input")

        with self.app.app_context():
            with self.assertRaises(ValueError):
                lookup()
        self.assertEqual(len(calls), 1)

    def test_unavailable_store_maps_to_503(self):
        with mock.patch.object(store, "fetch", side_effect=StoreUnavailable("Store temporarily unavailable")):
            resp = self.client.get("/orders/any", headers=self.auth(self.buyer))
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.get_json()["error_code"], "STORE_UNAVAILABLE")


class TestCommit(WorkflowTestCase):
    def test_integrity_error_is_conflict(self):
        with mock.patch.object(store, "db") as fake_db:
            fake_db.session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate seq"))
            with self.assertRaises(Conflict):
                store.commit_or_conflict()
            fake_db.session.rollback.assert_called_once()

    def test_operational_error_on_write_is_not_retried(self):
        with mock.patch.object(store, "db") as fake_db:
            fake_db.session.commit.side_effect = transient_error()
            with self.assertRaises(StoreUnavailable):
                store.commit_or_conflict()
            self.assertEqual(fake_db.session.commit.call_count, 1)
            fake_db.session.rollback.assert_called_once()


class TestHealth(WorkflowTestCase):
    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["status"], "healthy")


if __name__ == '__main__':
    unittest.main()
