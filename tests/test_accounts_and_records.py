from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from foodcoach.accounts import AccountStore, AuthError
from foodcoach.analysis.images import ImagePayload
from foodcoach.analysis.models import AnalysisResult
from foodcoach.health.metrics import compute_bmi, compute_bmr
from foodcoach.storage.records import RecordStore


class AccountStoreTests(unittest.TestCase):
    def test_sign_up_sign_in_sign_out(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = AccountStore(root=Path(tmpdir))
            seen: list = []
            token = store.subscribe(seen.append)
            self.assertEqual(seen, [None])

            created = store.sign_up("Maija@Example.com", "hunter22", "Maija Meikäläinen")
            self.assertEqual(created.email, "maija@example.com")
            self.assertIsNone(store.current_user())

            user = store.sign_in("maija@example.com", "hunter22")
            self.assertEqual(user.id, created.id)
            self.assertEqual(store.current_user().id, created.id)
            self.assertEqual(user.display_name(), "Maija Meikäläinen")

            store.sign_out()
            self.assertIsNone(store.current_user())
            self.assertEqual([u.id if u else None for u in seen], [None, created.id, None])

            store.unsubscribe(token)
            store.sign_in("maija@example.com", "hunter22")
            self.assertEqual(len(seen), 3)

    def test_passwords_are_hashed(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = AccountStore(root=Path(tmpdir))
            store.sign_up("a@b.fi", "secret-pass")
            raw = (Path(tmpdir) / "users.json").read_text(encoding="utf-8")
            self.assertNotIn("secret-pass", raw)

    def test_auth_failures(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = AccountStore(root=Path(tmpdir))
            store.sign_up("a@b.fi", "secret-pass")
            with self.assertRaises(AuthError):
                store.sign_up("A@B.fi", "another-pass")
            with self.assertRaises(AuthError):
                store.sign_in("a@b.fi", "wrong-pass")
            with self.assertRaises(AuthError):
                store.sign_in("nobody@b.fi", "secret-pass")
            with self.assertRaises(AuthError):
                store.sign_up("not-an-email", "secret-pass")
            with self.assertRaises(AuthError):
                store.sign_up("c@d.fi", "123")
            with self.assertRaises(AuthError):
                store.require_user()

    def test_display_name_falls_back_to_email(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = AccountStore(root=Path(tmpdir))
            user = store.sign_up("pekka@example.com", "secret-pass")
            self.assertEqual(user.display_name(), "pekka")


class RecordStoreTests(unittest.TestCase):
    def test_health_tests_insert_list_delete(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = RecordStore(root=Path(tmpdir))
            first = store.insert_health_test("u1", compute_bmi(170, 70))
            second = store.insert_health_test("u1", compute_bmr(170, 70, 30, "male"))
            store.insert_health_test("u2", compute_bmi(180, 80))

            rows = store.list_health_tests("u1")
            self.assertEqual([r["id"] for r in rows], [second["id"], first["id"]])
            self.assertEqual(rows[1]["test_data"], {"height": 170.0, "weight": 70.0})
            self.assertEqual(rows[1]["result_value"], 24.22)
            self.assertEqual(rows[1]["user_id"], "u1")
            self.assertEqual([r["test_type"] for r in store.list_health_tests("u1", test_type="bmr")], ["bmr"])

            store.delete_health_test("u1", first["id"])
            self.assertEqual(len(store.list_health_tests("u1")), 1)
            self.assertEqual(len(store.list_health_tests("u2")), 1)
            with self.assertRaises(KeyError):
                store.delete_health_test("u1", first["id"])

    def test_analyses_and_image_upload(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = RecordStore(root=Path(tmpdir))
            payload = ImagePayload(data=b"jpegbytes", mime_type="image/jpeg", filename="soup.jpg")
            url = store.upload_image(payload, "u1", timestamp_ms=1700000000000)
            self.assertTrue(url.startswith("file://"))
            self.assertTrue(url.endswith("/food-images/u1/1700000000000.jpg"))
            self.assertEqual((Path(tmpdir) / "food-images" / "u1" / "1700000000000.jpg").read_bytes(), b"jpegbytes")

            analysis = AnalysisResult(is_food=True, dish_name="Lohikeitto")
            row = store.insert_analysis("u1", url, analysis)
            listed = store.list_analyses("u1")
            self.assertEqual(listed[0]["id"], row["id"])
            self.assertEqual(listed[0]["analysis_data"]["dishName"], "Lohikeitto")
            self.assertEqual(listed[0]["image_url"], url)

            store.delete_analysis("u1", row["id"])
            self.assertEqual(store.list_analyses("u1"), [])

    def test_corrupt_table_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = RecordStore(root=Path(tmpdir))
            path = Path(tmpdir) / "health_tests" / "u1.json"
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(store.list_health_tests("u1"), [])
            store.insert_health_test("u1", compute_bmi(170, 70))
            self.assertEqual(len(json.loads(path.read_text(encoding="utf-8"))), 1)

    def test_non_finite_result_is_not_stored(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = RecordStore(root=Path(tmpdir))
            store.insert_health_test("u1", compute_bmi(170, 70))
            with self.assertRaises(ValueError):
                store.insert_health_test("u1", compute_bmi(0, 70))
            path = Path(tmpdir) / "health_tests" / "u1.json"
            self.assertEqual(len(json.loads(path.read_text(encoding="utf-8"))), 1)

    def test_rejects_unsafe_user_id(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = RecordStore(root=Path(tmpdir))
            with self.assertRaises(ValueError):
                store.list_health_tests("../..")


if __name__ == "__main__":
    unittest.main()
