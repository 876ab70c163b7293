"""
End-to-end marketplace flow: order status workflow with a dispute lock,
then a buyer/vendor conversation.
"""

import unittest

from tests.base import WorkflowTestCase


class TestWorkflowScenario(WorkflowTestCase):
    def test_full_flow(self):
        # Order placed by buyer
        order = self.create_order()
        self.assertEqual(order["status"], "new")

        # Vendor starts processing
        resp = self.set_status(order["objectId"], "processing", note="Vendor started processing")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["status"], "processing")

        # Buyer opens a dispute
        resp = self.open_dispute(order["objectId"])
        self.assertEqual(resp.status_code, 201)

        # Vendor can no longer ship
        resp = self.set_status(order["objectId"], "shipped", note="Trying to ship despite dispute")
        self.assertEqual(resp.status_code, 409)

        # Buyer and vendor talk it over
        resp = self.create_conversation(context={"productId": "some_prod_id"})
        self.assertEqual(resp.status_code, 201)
        conv_id = resp.get_json()["objectId"]

        self.assertEqual(self.send(conv_id, "Hello, is this available?").status_code, 201)
        self.assertEqual(self.send(conv_id, "Yes only for you my friend.", user_id=self.vendor).status_code, 201)

        resp = self.client.get(f"/conversations/{conv_id}/messages", headers=self.auth(self.buyer))
        self.assertEqual(resp.status_code, 200)
        results = resp.get_json()["results"]
        self.assertEqual(len(results), 2)
        self.assertEqual(
            [(m["senderId"], m["text"]) for m in results],
            [(self.buyer, "Hello, is this available?"), (self.vendor, "Yes only for you my friend.")],
        )

        resp = self.client.get("/conversations", headers=self.auth(self.vendor))
        self.assertIn(conv_id, [c["objectId"] for c in resp.get_json()["results"]])


if __name__ == '__main__':
    unittest.main()
