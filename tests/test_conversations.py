import unittest
from datetime import datetime, timezone

from tests.base import WorkflowTestCase
from workflow_service.extensions import db
from workflow_service.models.conversation import Conversation


class TestCreateConversation(WorkflowTestCase):
    def test_create_returns_object_id(self):
        resp = self.create_conversation(context={"productId": "some_prod_id"})
        self.assertEqual(resp.status_code, 201, resp.get_json())
        data = resp.get_json()
        self.assertTrue(data["objectId"])
        self.assertEqual(data["type"], "pre_sales")
        self.assertEqual(data["participants"], [self.buyer, self.vendor])
        self.assertEqual(data["context"], {"productId": "some_prod_id"})
        self.assertIsNone(data["lastMessageAt"])

    def test_caller_must_be_participant(self):
        resp = self.create_conversation(caller=self.stranger)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error_code"], "INVALID_ARGUMENT")

    def test_needs_two_distinct_participants(self):
        self.assertEqual(self.create_conversation(participants=[self.buyer]).status_code, 400)
        self.assertEqual(self.create_conversation(participants=[self.buyer, self.buyer]).status_code, 400)

    def test_duplicate_participants_collapse(self):
        resp = self.create_conversation(participants=[self.buyer, self.vendor, self.buyer])
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.get_json()["participants"], [self.buyer, self.vendor])

    def test_malformed_payloads(self):
        headers = self.auth(self.buyer)
        bodies = [
            {"participants": [self.buyer, self.vendor]},
            {"type": "pre_sales"},
            {"type": "pre_sales", "participants": self.buyer},
            {"type": "pre_sales", "participants": [self.buyer, 42]},
            {"type": "pre_sales", "participants": [self.buyer, self.vendor], "context": "x"},
            {"type": "t" * 51, "participants": [self.buyer, self.vendor]},
            {"type": "pre_sales", "participants": [self.buyer, "p" * 65]},
        ]
        for body in bodies:
            self.assertEqual(self.client.post("/conversations", json=body, headers=headers).status_code, 400, body)

    def test_group_conversation(self):
        resp = self.create_conversation(participants=[self.buyer, self.vendor, self.stranger], type_="dispute")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(len(resp.get_json()["participants"]), 3)


class TestInbox(WorkflowTestCase):
    def test_lists_only_member_conversations_newest_first(self):
        first = self.create_conversation().get_json()
        second = self.create_conversation(type_="order_support").get_json()
        other = self.create_conversation(caller=self.stranger, participants=[self.stranger, "someone_else"]).get_json()

        resp = self.client.get("/conversations", headers=self.auth(self.vendor))
        self.assertEqual(resp.status_code, 200)
        ids = [c["objectId"] for c in resp.get_json()["results"]]
        self.assertEqual(ids, [second["objectId"], first["objectId"]])
        self.assertNotIn(other["objectId"], ids)
        self.assertNotIn("pagination", resp.get_json())

        stranger_ids = [
            c["objectId"]
            for c in self.client.get("/conversations", headers=self.auth(self.stranger)).get_json()["results"]
        ]
        self.assertEqual(stranger_ids, [other["objectId"]])

    def test_equal_created_at_falls_back_to_insertion_order(self):
        first = self.create_conversation().get_json()["objectId"]
        second = self.create_conversation().get_json()["objectId"]
        same_instant = datetime(2024, 1, 1, tzinfo=timezone.utc)
        with self.app.app_context():
            for conv in Conversation.query.all():
                conv.created_at = same_instant
            db.session.commit()

        resp = self.client.get("/conversations", headers=self.auth(self.buyer))
        self.assertEqual([c["objectId"] for c in resp.get_json()["results"]], [second, first])

    def test_empty_inbox(self):
        resp = self.client.get("/conversations", headers=self.auth(self.stranger))
        self.assertEqual(resp.get_json(), {"results": []})

    def test_pagination(self):
        created = [self.create_conversation().get_json()["objectId"] for _ in range(3)]

        resp = self.client.get("/conversations?page=1&per_page=2", headers=self.auth(self.buyer))
        data = resp.get_json()
        self.assertEqual([c["objectId"] for c in data["results"]], [created[2], created[1]])
        self.assertEqual(data["pagination"], {"page": 1, "per_page": 2, "total": 3, "total_pages": 2})

        data = self.client.get("/conversations?page=2&per_page=2", headers=self.auth(self.buyer)).get_json()
        self.assertEqual([c["objectId"] for c in data["results"]], [created[0]])

    def test_invalid_page(self):
        resp = self.client.get("/conversations?page=0", headers=self.auth(self.buyer))
        self.assertEqual(resp.status_code, 400)


class TestGetConversation(WorkflowTestCase):
    def test_access(self):
        conv = self.create_conversation().get_json()
        url = f"/conversations/{conv['objectId']}"
        self.assertEqual(self.client.get(url, headers=self.auth(self.vendor)).status_code, 200)
        self.assertEqual(self.client.get(url, headers=self.auth(self.stranger)).status_code, 403)
        self.assertEqual(self.client.get("/conversations/nope", headers=self.auth(self.vendor)).status_code, 404)


if __name__ == '__main__':
    unittest.main()
