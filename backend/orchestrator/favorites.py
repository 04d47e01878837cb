import os
import time
import logging
from typing import List, Dict, Any

from shared.database import Database

logger = logging.getLogger('FavoritesStore')

class FavoritesStore:
    """Keyed store of the user's favorite locations."""

    def __init__(self, data_dir: str = "data"):
        self.data_dir = data_dir
        self.db_path = os.path.join(data_dir, "skymind.db")
        self.db = Database(self.db_path)

    @staticmethod
    def _row_to_dict(row) -> Dict[str, Any]:
        data = {
            "id": int(row["id"]) if row["id_is_int"] else row["id"],
            "name": row["name"],
            "latitude": row["latitude"],
            "longitude": row["longitude"],
        }
        if row["country"]:
            data["country"] = row["country"]
        if row["admin1"]:
            data["admin1"] = row["admin1"]
        return data

    def list_favorites(self) -> List[Dict[str, Any]]:
        rows = self.db.fetch_all("SELECT * FROM favorites ORDER BY created_at ASC, rowid ASC")
        return [self._row_to_dict(r) for r in rows]

    def is_favorite(self, location_id: str) -> bool:
        return self.db.fetch_one("SELECT id FROM favorites WHERE id = ?", (str(location_id),)) is not None

    def add_favorite(self, location: Dict[str, Any]) -> Dict[str, Any]:
        """Add a location; adding an existing id is a no-op.

        Ids are keyed as text; geocoder ids come back as ints.
        """
        location_id = str(location["id"])
        if self.is_favorite(location_id):
            logger.info(f"Location {location_id} already in favorites")
        else:
            self.db.execute(
                "INSERT INTO favorites (id, id_is_int, name, latitude, longitude, country, admin1, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (location_id, int(isinstance(location["id"], int)), location["name"],
                 float(location["latitude"]), float(location["longitude"]),
                 location.get("country"), location.get("admin1"), int(time.time() * 1000))
            )
            logger.info(f"Added favorite {location_id} ({location['name']})")
        return self._row_to_dict(self.db.fetch_one("SELECT * FROM favorites WHERE id = ?", (location_id,)))

    def remove_favorite(self, location_id: str) -> bool:
        cursor = self.db.execute("DELETE FROM favorites WHERE id = ?", (str(location_id),))
        return cursor.rowcount > 0
