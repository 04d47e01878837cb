import unittest
import os
import shutil
import sys
import tempfile

# Add backend to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from orchestrator.favorites import FavoritesStore
from shared.database import Database

JAKARTA = {"id": 1642911, "name": "Jakarta", "latitude": -6.2146, "longitude": 106.8451,
           "country": "Indonesia", "admin1": "Jakarta"}
TOKYO = {"id": 1850147, "name": "Tokyo", "latitude": 35.6895, "longitude": 139.69171}


class TestFavoritesStore(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="skymind_test_")

    def tearDown(self):
        if os.path.exists(self.test_dir):
            shutil.rmtree(self.test_dir)

    def test_init_creates_db(self):
        FavoritesStore(data_dir=self.test_dir)
        self.assertTrue(os.path.exists(os.path.join(self.test_dir, "skymind.db")))

    def test_add_and_list(self):
        store = FavoritesStore(data_dir=self.test_dir)
        stored = store.add_favorite(JAKARTA)

        self.assertEqual(stored, JAKARTA)
        self.assertTrue(store.is_favorite("1642911"))
        self.assertEqual(store.list_favorites(), [stored])

        # Verify in DB
        db = Database(os.path.join(self.test_dir, "skymind.db"))
        row = db.fetch_one("SELECT * FROM favorites WHERE id = ?", ("1642911",))
        self.assertEqual(row['name'], "Jakarta")

    def test_id_type_is_preserved(self):
        store = FavoritesStore(data_dir=self.test_dir)
        store.add_favorite(JAKARTA)
        store.add_favorite(dict(TOKYO, id="custom-tokyo"))

        ids = [f["id"] for f in store.list_favorites()]
        self.assertEqual(ids, [1642911, "custom-tokyo"])
        self.assertTrue(store.is_favorite(1642911))

    def test_optional_fields_omitted(self):
        store = FavoritesStore(data_dir=self.test_dir)
        stored = store.add_favorite(TOKYO)
        self.assertNotIn("country", stored)
        self.assertNotIn("admin1", stored)

    def test_add_is_idempotent(self):
        store = FavoritesStore(data_dir=self.test_dir)
        store.add_favorite(JAKARTA)
        store.add_favorite(dict(JAKARTA, name="Renamed"))

        favorites = store.list_favorites()
        self.assertEqual(len(favorites), 1)
        self.assertEqual(favorites[0]["name"], "Jakarta")

    def test_remove(self):
        store = FavoritesStore(data_dir=self.test_dir)
        store.add_favorite(JAKARTA)
        store.add_favorite(TOKYO)

        self.assertTrue(store.remove_favorite("1642911"))
        self.assertFalse(store.remove_favorite("1642911"))
        self.assertEqual([f["name"] for f in store.list_favorites()], ["Tokyo"])

    def test_persists_across_instances(self):
        FavoritesStore(data_dir=self.test_dir).add_favorite(TOKYO)
        self.assertTrue(FavoritesStore(data_dir=self.test_dir).is_favorite("1850147"))


if __name__ == '__main__':
    unittest.main()
