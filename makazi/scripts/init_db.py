# makazi/scripts/init_db.py
from makazi.config import CATALOG_DB_PATH
from makazi.services.catalog import seed_defaults

if __name__ == "__main__":
    n = seed_defaults(CATALOG_DB_PATH)
    print(f"Catalog ready at: {CATALOG_DB_PATH} ({n} locations)")
